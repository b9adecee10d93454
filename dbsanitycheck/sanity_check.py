from collections.abc import Sequence
import logging

from dbsanitycheck.exclusions import MalformedExclusionError, ParsedExclusion, parse_exclusion, split_rows
from dbsanitycheck.executor import CheckExecutor, QueryExecutionError, QueryRunner
from dbsanitycheck.report import assemble_report
from dbsanitycheck.schemas import (
    Check,
    CheckResult,
    CheckStatus,
    ExclusionError,
    ExecutionError,
    Finding,
    KnownFalsePositive,
    Report,
)


logger = logging.getLogger(__name__)

ALL_FALSE_POSITIVES_MESSAGE = "All the results are known false positives"


class SanityCheckRunner:
    """Runs a check catalog in order and reconciles results against known exclusions.

    Each call to ``run`` keeps its own accumulators, so one runner can serve
    any number of independent runs.
    """

    def __init__(self, query_runner: QueryRunner) -> None:
        self.executor = CheckExecutor(query_runner)

    def run(self, checks: Sequence[Check]) -> Report:
        logger.info("executing sanity checks", extra={"checks": len(checks)})

        findings: list[Finding] = []
        errors: list[ExecutionError] = []
        false_positives: list[KnownFalsePositive] = []
        exclusion_errors: list[ExclusionError] = []

        prev_category: str | None = None
        for check in checks:
            if check.category != prev_category:
                logger.info(" ========== Category = %s ========== ", check.category)
                prev_category = check.category

            result = self.run_check(check)
            exclusion_errors.extend(result.exclusion_errors)
            if result.finding is not None:
                findings.append(result.finding)
            if result.error is not None:
                errors.append(result.error)
            if result.false_positive is not None:
                false_positives.append(result.false_positive)

        return assemble_report(
            findings,
            errors,
            false_positives=false_positives,
            exclusion_errors=exclusion_errors,
            checks_run=len(checks),
        )

    def run_check(self, check: Check) -> CheckResult:
        logger.info(" ===== %s ===== ", check.topic)

        try:
            rows = self.executor.execute(check)
        except QueryExecutionError as exc:
            logger.error("Could not execute the query %s\n%s", exc.query, exc.message, extra={"check_id": check.id})
            return CheckResult(check=check, status=CheckStatus.FAILED, error=ExecutionError(check, exc.message))

        if not rows:
            return CheckResult(check=check, status=CheckStatus.CLEAN)

        exclusions, exclusion_errors = self._load_exclusions(check)
        surviving, excluded = split_rows(rows, exclusions)

        if not surviving:
            logger.info(ALL_FALSE_POSITIVES_MESSAGE, extra={"topic": check.topic, "excluded_rows": excluded})
            return CheckResult(
                check=check,
                status=CheckStatus.ALL_EXCLUDED,
                false_positive=KnownFalsePositive(check.category, check.topic, excluded),
                exclusion_errors=exclusion_errors,
            )

        logger.info("* Found %d results for %s", len(surviving), check.topic, extra={"excluded_rows": excluded})
        return CheckResult(
            check=check,
            status=CheckStatus.ANOMALY,
            finding=Finding(category=check.category, topic=check.topic, rows=tuple(surviving)),
            exclusion_errors=exclusion_errors,
        )

    def _load_exclusions(self, check: Check) -> tuple[list[ParsedExclusion], tuple[ExclusionError, ...]]:
        parsed: list[ParsedExclusion] = []
        errors: list[ExclusionError] = []
        for exclusion in check.exclusions:
            try:
                parsed.append(parse_exclusion(exclusion.raw))
            except MalformedExclusionError as exc:
                # Skipped rather than treated as "no match"; surfaced as a configuration error.
                logger.warning(
                    "skipping malformed exclusion",
                    extra={"check_id": check.id, "exclusion_id": exclusion.id, "error": str(exc)},
                )
                errors.append(ExclusionError(check=check, exclusion_id=exclusion.id, message=str(exc)))
        return parsed, tuple(errors)
