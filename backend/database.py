from contextlib import contextmanager
from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker, declarative_base

from config.lending_config import settings
from exceptions import DataAccessError

Base = declarative_base()


def _enable_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA busy_timeout=5000")  # Wait up to 5s for locks instead of failing immediately
    cursor.execute("PRAGMA foreign_keys=ON")  # Required for ON DELETE CASCADE
    cursor.close()


def create_lending_engine(url: str, **kwargs) -> Engine:
    """
    Create an engine for the lending store.

    SQLite connections get foreign key enforcement and WAL mode; other
    backends rely on their native row locking and cascades.
    """
    if url.startswith('sqlite'):
        kwargs.setdefault('connect_args', {'check_same_thread': False})
        db_path = url.partition(':///')[2]
        if db_path and db_path != ':memory:':
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
    else:
        kwargs.setdefault('pool_pre_ping', True)  # Verify connections are alive before using
        kwargs.setdefault('pool_recycle', 3600)

    new_engine = create_engine(url, echo=False, **kwargs)
    if url.startswith('sqlite'):
        event.listen(new_engine, "connect", _enable_sqlite_pragmas)
    return new_engine


engine = create_lending_engine(settings.database_url)
SessionLocal = sessionmaker(bind=engine)


def get_db():
    """Yield a session and close it when the caller is done"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session):
    """
    Run a block of writes as one unit.

    The outermost scope commits on success and rolls back on any exception.
    Nested scopes join the enclosing one, so a service operation that calls
    another transactional operation still commits or fails as a whole.
    """
    depth = db.info.get('transaction_depth', 0)
    db.info['transaction_depth'] = depth + 1
    try:
        yield db
        if depth == 0:
            try:
                db.commit()
            except SQLAlchemyError as e:
                raise DataAccessError("commit", f"Failed to commit transaction: {type(e).__name__}") from e
    except BaseException:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info['transaction_depth'] = depth
