"""Generate database session for the local storage"""

from contextlib import contextmanager
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from icchess.core.config import ClientConfig
from icchess.db.schema import Base


def create_storage_engine(config: ClientConfig) -> Engine:
    engine = create_engine(config.storage_url)

    # Ensure all tables are created
    Base.metadata.create_all(bind=engine)
    return engine


@contextmanager
def storage_session(config: ClientConfig) -> Generator[Session, None, None]:
    """One session per page lifetime. Closed on page unload."""
    engine = create_storage_engine(config)
    db = sessionmaker(bind=engine)()
    try:
        yield db
    finally:
        db.close()
        engine.dispose()
