import logging

from sqlalchemy.orm import Session, sessionmaker

from dbsanitycheck.check_store import find_all_checks
from dbsanitycheck.executor import SqlAlchemyQueryRunner
from dbsanitycheck.notifier import Notifier
from dbsanitycheck.report import log_report
from dbsanitycheck.sanity_check import SanityCheckRunner
from dbsanitycheck.schemas import Report


logger = logging.getLogger(__name__)


class SanityCheckService:
    def __init__(self, session_factory: sessionmaker[Session], notifier: Notifier) -> None:
        self.session_factory = session_factory
        self.notifier = notifier

    def execute(self) -> Report:
        """Load the catalog, run every check, log the results and hand the report to the notifier.

        CatalogLoadError aborts before any check runs; NotificationError reaches the caller
        after the report has been built and logged.
        """
        logger.info("sanity check started")

        with self.session_factory() as db:
            checks = find_all_checks(db)
            logger.info("Found %d queries", len(checks))

            try:
                report = SanityCheckRunner(SqlAlchemyQueryRunner(db)).run(checks)
            finally:
                # Checks only read; drop whatever transaction they opened.
                db.rollback()

        log_report(report, logger)
        logger.info("All queries executed")

        self.notifier.send(report, report.errors)

        logger.info(
            "Sanity check finished",
            extra={"has_anomalies": report.has_anomalies, "findings": report.finding_count, "errors": report.error_count},
        )
        return report
