import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from wastebin.models.base import Base
from wastebin.models import paste  # noqa: F401  registers the pastes table

logger = logging.getLogger(__name__)

# =========================
# ENGINE CONFIGURATION
# =========================

def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for the given URL. PostgreSQL gets a connection pool;
    SQLite gets a busy timeout so concurrent writers wait instead of failing.
    """
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False, "timeout": 30},
            echo=echo,
        )

    return create_engine(
        database_url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=5,         # Maintain 5 connections in the pool
        max_overflow=10,     # Allow 10 extra connections if needed
        pool_recycle=3600,   # Recycle connections every hour
        echo=echo
    )


# =========================
# SESSION CONFIGURATION
# =========================

def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine
    )


@contextmanager
def db_session(session_factory: sessionmaker):
    """
    Context manager for standalone DB operations.
    Usage:
        with db_session(factory) as db:
            db.get(Paste, paste_id)
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine) -> None:
    """Create all tables based on registered models."""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def drop_db(engine: Engine) -> None:
    Base.metadata.drop_all(bind=engine)
    logger.info("Database tables dropped")


def check_connection(engine: Engine) -> bool:
    """
    Check the DB connection.
    """
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
