from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker


class Base(DeclarativeBase):

    pass


def create_db_engine(database_url: str) -> Engine:
    connect_args = {}
    if database_url.startswith("sqlite"):
        # result writes happen from worker threads
        connect_args["check_same_thread"] = False
    return create_engine(
        database_url,
        echo=False,
        connect_args=connect_args,
    )


def create_session_factory(engine: Engine) -> "sessionmaker[Session]":
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
    )


def init_schema(engine: Engine) -> None:
    # imported for its side effect of registering the table on Base
    from entry_importer.models import entry  # noqa: F401

    Base.metadata.create_all(bind=engine)
