from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from ..config import get_settings

settings = get_settings()


def configure_sqlite(engine: Engine) -> Engine:
    """
    Make SQLite honour foreign keys and real transactions.

    pysqlite defers BEGIN until the first write, which turns an outer SAVEPOINT into
    an autocommitting transaction; SQLAlchemy emits BEGIN itself instead.
    """
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


if settings.database_url.startswith("sqlite"):
    engine = configure_sqlite(create_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"check_same_thread": False}
    ))
else:
    engine = create_engine(
        settings.database_url,
        pool_pre_ping=True,
        echo=settings.debug
    )

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def unit_of_work(session: Session) -> Iterator[Session]:
    """Commit everything done inside the block, or roll all of it back."""
    try:
        yield session
        session.commit()
    except BaseException:
        session.rollback()
        raise


def create_tables():
    # Import models to register them with Base
    from ..models import department, subject, exam, question, user
    Base.metadata.create_all(bind=engine)
