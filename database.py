import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from config import get_settings
from errors import AppError, ConflictError, InternalError, StoreUnavailable

logger = logging.getLogger(__name__)


def _create_engine() -> Engine:
    settings = get_settings()
    connect_args: dict[str, object] = {}
    engine_args: dict[str, object] = {}
    if settings.database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
        connect_args["timeout"] = settings.db_timeout_secs
    else:
        engine_args["pool_timeout"] = settings.db_timeout_secs
        engine_args["pool_pre_ping"] = True

    eng = create_engine(
        settings.database_url, connect_args=connect_args, **engine_args
    )
    if settings.database_url.startswith("sqlite"):
        event.listen(eng, "connect", _enable_sqlite_pragmas)
    return eng


def _enable_sqlite_pragmas(dbapi_conn, _record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL;")
    cursor.execute("PRAGMA foreign_keys=ON;")
    cursor.close()


engine = _create_engine()
SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


@contextmanager
def session_scope() -> Iterator[Session]:
    session: Session = SessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def unit_of_work(session: Session, operation: str) -> Iterator[Session]:
    """Commit everything done inside the block, or nothing at all.

    Storage failures are translated into the application error taxonomy after
    the session has been rolled back, so callers never observe a balance
    adjustment without its transaction row (or the reverse).

    Nested blocks join the outermost one, which alone commits or rolls back.
    """
    if session.info.get("unit_of_work"):
        yield session
        return
    session.info["unit_of_work"] = operation
    try:
        yield session
        session.commit()
    except AppError:
        session.rollback()
        raise
    except StaleDataError as exc:
        session.rollback()
        logger.info(f"{operation}: concurrent modification detected")
        raise ConflictError(
            "The record was modified by another request, please retry"
        ) from exc
    except (OperationalError, PoolTimeoutError) as exc:
        session.rollback()
        logger.warning(f"{operation}: store unavailable: {exc}")
        raise StoreUnavailable() from exc
    except SQLAlchemyError as exc:
        session.rollback()
        logger.exception(f"{operation}: unexpected storage failure")
        raise InternalError() from exc
    except ArithmeticError as exc:
        # Values too large for the column, e.g. cents overflowing INTEGER.
        session.rollback()
        logger.exception(f"{operation}: value out of range")
        raise InternalError() from exc
    except BaseException:
        session.rollback()
        raise
    finally:
        session.info.pop("unit_of_work", None)
