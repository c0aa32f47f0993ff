# barbershop/db.py

from contextlib import contextmanager

from sqlalchemy.exc import OperationalError
from sqlmodel import SQLModel, Session, create_engine
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from barbershop import models  # noqa: F401  registers tables on the metadata
from barbershop.config import DATABASE_URL, READ_RETRY_ATTEMPTS
from barbershop.errors import TransientStoreError
from barbershop.logging_config import get_logger

logger = get_logger(__name__)


def make_engine(url: str = DATABASE_URL):
    connect_args = {}
    if url.startswith("sqlite"):
        # required for SQLite + FastAPI threadpool; wait on writer locks
        connect_args = {"check_same_thread": False, "timeout": 5}
    return create_engine(
        url,
        echo=False,          # set to True to see SQL
        connect_args=connect_args,
    )


# Engine = connection to the database
engine = make_engine()


def create_db_and_tables(bind=None):
    SQLModel.metadata.create_all(bind if bind is not None else engine)


# Dependency: one session per request
def get_session():
    with Session(engine) as session:
        yield session


@contextmanager
def store_errors(session: Session, action: str):
    """Map storage-level failures to TransientStoreError, rolling back first."""
    try:
        yield
    except OperationalError as exc:
        session.rollback()
        logger.warning("store_unavailable", action=action, error=str(exc.orig))
        raise TransientStoreError(f"Storage unavailable during {action}, please try again") from exc


# Idempotent reads only; the booking commit is never retried
read_retry = retry(
    retry=retry_if_exception_type(TransientStoreError),
    stop=stop_after_attempt(READ_RETRY_ATTEMPTS),
    wait=wait_exponential(multiplier=0.05, max=1),
    reraise=True,
)
