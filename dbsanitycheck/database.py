from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from dbsanitycheck.db_models import Base


def build_session_factory(database_url: str, *, create_tables: bool = False) -> sessionmaker[Session]:
    connect_args: dict[str, object] = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, future=True, connect_args=connect_args)
    # The catalog tables live in the audited database; only tests and local setups create them.
    if create_tables:
        Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
