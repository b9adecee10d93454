from collections.abc import Mapping, Sequence
from datetime import date, datetime
import logging
from typing import Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from dbsanitycheck.schemas import Check, ResultRow


logger = logging.getLogger(__name__)


class QueryExecutionError(RuntimeError):
    def __init__(self, query: str, message: str) -> None:
        super().__init__(message)
        self.query = query
        self.message = message


class QueryRunner(Protocol):
    def execute(self, sql: str) -> Sequence[Mapping[str, object]]:
        """Run raw SQL and return one ordered column -> value mapping per row.

        Raises sqlalchemy.exc.SQLAlchemyError on any data-access failure.
        """
        ...


class SqlAlchemyQueryRunner:
    def __init__(self, db: Session) -> None:
        self.db = db

    def execute(self, sql: str) -> list[dict[str, object]]:
        try:
            # Driver-level execution keeps the catalog SQL verbatim (no bind-parameter parsing of ":name").
            result = self.db.connection().exec_driver_sql(sql)
            columns = list(result.keys())
            return [dict(zip(columns, row)) for row in result]
        except SQLAlchemyError:
            # A failed statement aborts the transaction on some backends; later checks share this session.
            self.db.rollback()
            raise


def stringify(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # Same spelling as JSON so exclusions written with true/false match boolean columns.
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (bytes, bytearray, memoryview)):
        raw = bytes(value)
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            # Non-text binary is rendered as hex so distinct values never collapse to one string.
            return "\\x" + raw.hex()
    if isinstance(value, datetime):
        return value.isoformat(" ")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def failure_message(exc: SQLAlchemyError) -> str:
    # DBAPIError wraps the driver error; its own str() also carries the SQL and a help link.
    orig = getattr(exc, "orig", None)
    if orig is not None:
        return str(orig)
    return str(exc)


class CheckExecutor:
    def __init__(self, query_runner: QueryRunner) -> None:
        self.query_runner = query_runner

    def execute(self, check: Check) -> list[ResultRow]:
        logger.debug("executing check query", extra={"check_id": check.id, "query": check.query})
        # Single attempt; retry policy belongs to whoever schedules the run.
        try:
            records = self.query_runner.execute(check.query)
        except SQLAlchemyError as exc:
            raise QueryExecutionError(check.query, failure_message(exc)) from exc

        return [{str(column): stringify(value) for column, value in record.items()} for record in records]
