import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from .errors import ConstraintViolationError, PersistenceError, StoreError

logger = logging.getLogger(__name__)

# Declarative base: every table model in database_models inherits from it
Base = declarative_base()


def _enable_sqlite_foreign_keys(dbapi_conn, connection_record):
    # SQLite ships with FK enforcement off; turn it on for every raw connection
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(database_url: str, echo: bool = False) -> Engine:
    """Creates the engine for one store. Opened once, reused by every operation."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        # 'check_same_thread' is only needed for SQLite
        connect_args["check_same_thread"] = False

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@contextmanager
def transaction(session_factory: sessionmaker, action: str) -> Iterator[Session]:
    """
    Opens a session and runs the block inside one transaction.

    Commits when the block finishes and rolls everything back on any error.
    SQLAlchemy errors come out as PersistenceError (or ConstraintViolationError
    for integrity failures) with the original exception as the cause.
    """
    db = session_factory()
    try:
        with db.begin():
            yield db
    except IntegrityError as e:
        logger.error("Rolled back '%s': constraint violated: %s", action, e.orig)
        raise ConstraintViolationError(f"{action} failed: {e.orig}", cause=e) from e
    except SQLAlchemyError as e:
        logger.error("Rolled back '%s': %s", action, e)
        raise PersistenceError(f"{action} failed: {e}", cause=e) from e
    except StoreError:
        logger.error("Rolled back '%s'", action)
        raise
    finally:
        db.close()
