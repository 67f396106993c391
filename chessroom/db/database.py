"""Generate database session"""

from typing import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from chessroom.core.config import configure_logging, get_settings
from chessroom.db.schema import Base

settings = get_settings()
engine = create_engine(settings.database_url, echo=settings.database_echo)
SessionLocal = sessionmaker(bind=engine)


def init_db() -> None:
    """Application start: configure logging and ensure all tables are created"""
    configure_logging(settings.log_level)
    Base.metadata.create_all(bind=engine)


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
