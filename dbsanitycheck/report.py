from collections.abc import Iterable, Mapping
import logging

from dbsanitycheck.schemas import ExclusionError, ExecutionError, Finding, KnownFalsePositive, Report


def assemble_report(
    findings: Iterable[Finding],
    errors: Iterable[ExecutionError],
    *,
    false_positives: Iterable[KnownFalsePositive] = (),
    exclusion_errors: Iterable[ExclusionError] = (),
    checks_run: int = 0,
) -> Report:
    return Report(
        findings=tuple(findings),
        errors=tuple(errors),
        false_positives=tuple(false_positives),
        exclusion_errors=tuple(exclusion_errors),
        checks_run=checks_run,
    )


def format_row(row: Mapping[str, str | None]) -> str:
    return ", ".join(f"{column}={'NULL' if value is None else value}" for column, value in row.items())


def report_to_dict(report: Report) -> dict[str, object]:
    return {
        "has_anomalies": report.has_anomalies,
        "checks_run": report.checks_run,
        "finding_count": report.finding_count,
        "error_count": report.error_count,
        "anomalous_row_count": report.anomalous_row_count,
        "findings": [
            {"category": finding.category, "topic": finding.topic, "rows": [dict(row) for row in finding.rows]}
            for finding in report.findings
        ],
        "errors": [
            {
                "check_id": error.check.id,
                "category": error.check.category,
                "topic": error.check.topic,
                "query": error.check.query,
                "message": error.message,
            }
            for error in report.errors
        ],
        "false_positives": [
            {"category": item.category, "topic": item.topic, "excluded_rows": item.excluded_rows}
            for item in report.false_positives
        ],
        "exclusion_errors": [
            {
                "check_id": item.check.id,
                "topic": item.check.topic,
                "exclusion_id": item.exclusion_id,
                "message": item.message,
            }
            for item in report.exclusion_errors
        ],
    }


def render_report_text(report: Report) -> str:
    lines: list[str] = []
    if not report.has_anomalies:
        lines.append("No inconsistencies found")

    for finding in report.findings:
        lines.append(f"** Inconsistency at [{finding.category}] {finding.topic}")
        lines.extend(format_row(row) for row in finding.rows)
        lines.append("")

    if report.errors:
        lines.append("Queries with errors:")
        for error in report.errors:
            lines.append(f"[{error.check.category}] {error.check.topic}")
            lines.append(error.check.query)
            lines.append(f"Error: {error.message}")
            lines.append("")

    if report.exclusion_errors:
        lines.append("Malformed exclusions:")
        for item in report.exclusion_errors:
            lines.append(f"[{item.check.category}] {item.check.topic} exclusion={item.exclusion_id}: {item.message}")

    return "\n".join(lines).rstrip() + "\n"


def log_report(report: Report, logger: logging.Logger) -> None:
    for finding in report.findings:
        logger.warning(" ** Inconsistency at [%s] %s", finding.category, finding.topic)
        for row in finding.rows:
            logger.info(format_row(row))

    for error in report.errors:
        logger.error("query failed for [%s] %s: %s", error.check.category, error.check.topic, error.message)

    logger.info(
        "sanity check summary",
        extra={
            "checks_run": report.checks_run,
            "findings": report.finding_count,
            "errors": report.error_count,
            "false_positives": len(report.false_positives),
        },
    )
