from collections.abc import Callable, Generator, Mapping, Sequence
from pathlib import Path

import pytest
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from dbsanitycheck.config import Settings
from dbsanitycheck.database import build_session_factory
from dbsanitycheck.db_models import SanityCheck, SanityCheckCategory, SanityCheckExclusion
from dbsanitycheck.schemas import Check, Exclusion


class _FakeQueryRunner:
    """Answers queries from a dict; an exception value is raised instead of returned."""

    def __init__(self, answers: Mapping[str, object]) -> None:
        self.answers = dict(answers)
        self.executed: list[str] = []

    def execute(self, sql: str) -> Sequence[Mapping[str, object]]:
        self.executed.append(sql)
        answer = self.answers.get(sql, [])
        if isinstance(answer, Exception):
            raise answer
        return answer


def _make_check(
    topic: str,
    query: str | None = None,
    *,
    category: str = "Persons",
    exclusions: Sequence[str] = (),
    check_id: int | None = None,
) -> Check:
    return Check(
        id=check_id,
        category=category,
        topic=topic,
        query=query or f"SELECT * FROM anomalies WHERE topic = '{topic}'",
        exclusions=tuple(Exclusion(id=index + 1, raw=raw) for index, raw in enumerate(exclusions)),
    )


def _seed_check(
    db: Session,
    *,
    category: str,
    topic: str,
    query: str,
    exclusions: Sequence[str] = (),
) -> SanityCheck:
    existing = db.execute(select(SanityCheckCategory).where(SanityCheckCategory.name == category)).scalar_one_or_none()
    category_row = existing or SanityCheckCategory(name=category)
    check = SanityCheck(category=category_row, topic=topic, query=query)
    for raw in exclusions:
        check.exclusions.append(SanityCheckExclusion(exclusion=raw))
    db.add(check)
    db.commit()
    return check


def _create_persons_table(db: Session) -> None:
    conn = db.connection()
    conn.exec_driver_sql("CREATE TABLE persons (id INTEGER PRIMARY KEY, name TEXT, country TEXT, dob DATE)")
    conn.exec_driver_sql(
        "INSERT INTO persons (id, name, country, dob) VALUES "
        "(1, 'Ana', 'Brazil', NULL), "
        "(2, 'Bob', 'USA', '1990-01-01'), "
        "(3, '', 'Brazil', '1985-05-05')"
    )
    db.commit()


@pytest.fixture()
def temp_workspace(tmp_path: Path) -> Path:
    (tmp_path / "outputs").mkdir(parents=True, exist_ok=True)
    return tmp_path


@pytest.fixture()
def test_settings(temp_workspace: Path) -> Settings:
    return Settings(
        app_name="dbsanitycheck",
        database_url=f"sqlite:///{temp_workspace / 'test.db'}",
        log_level="INFO",
        email_enabled=True,
        smtp_host="smtp.example.com",
        smtp_port=25,
        smtp_username="",
        smtp_password="",
        smtp_use_tls=False,
        mail_from="sanity@example.com",
        mail_to=("results@example.com", "admins@example.com"),
        mail_subject="Sanity check",
        max_send_retries=1,
        retry_backoff_seconds=0,
    )


@pytest.fixture()
def session_factory(test_settings: Settings) -> Generator[sessionmaker[Session], None, None]:
    yield build_session_factory(test_settings.database_url, create_tables=True)


@pytest.fixture()
def fake_runner() -> type[_FakeQueryRunner]:
    return _FakeQueryRunner


@pytest.fixture()
def make_check() -> Callable[..., Check]:
    return _make_check


@pytest.fixture()
def seed_check() -> Callable[..., SanityCheck]:
    return _seed_check


@pytest.fixture()
def create_persons_table() -> Callable[[Session], None]:
    return _create_persons_table
