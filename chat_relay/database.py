from typing import Dict, Optional, Tuple

from fastapi import Depends
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker

from chat_relay.config import Settings, get_settings
from chat_relay.logging_config import get_logger

logger = get_logger("database")

Base = declarative_base()

SessionLocal = sessionmaker(autocommit=False, autoflush=False)

_engines: Dict[Tuple[str, Optional[str]], Engine] = {}


def build_engine(config: Settings) -> Optional[Engine]:
    """Create an engine from settings, or None when no database is configured."""
    if not config.database_url:
        return None
    url = make_url(config.database_url)
    if config.database_password:
        url = url.set(password=config.database_password)
    return create_engine(url, pool_pre_ping=True)


def get_engine(config: Settings) -> Optional[Engine]:
    """Cached engine for the configured database.

    Returns None when the database is not configured or the URL is unusable,
    so callers get an unbound session whose first query fails inside their
    own error handling.
    """
    if not config.database_url:
        return None
    key = (config.database_url, config.database_password)
    if key not in _engines:
        try:
            _engines[key] = build_engine(config)
        except SQLAlchemyError as e:
            logger.error("Could not create database engine", extra={"context": {"error": str(e)}})
            return None
    return _engines[key]


def get_db(config: Settings = Depends(get_settings)):
    db = SessionLocal(bind=get_engine(config))
    try:
        yield db
    finally:
        db.close()
