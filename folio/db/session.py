import logging

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..models import DatabaseConfig

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(config: DatabaseConfig) -> Engine:
    """Create the engine, sharing one connection for in-memory SQLite."""
    kwargs = {"echo": config.echo}
    if config.url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        if config.url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(config.url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def init_db(engine: Engine) -> None:
    # Import for side effect: registers the tables on Base.metadata
    from . import tables  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready")
