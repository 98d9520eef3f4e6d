from sqlalchemy.engine import Engine

from querygate.api.db import models  # noqa: F401  (registers tables on Base)
from querygate.api.db.base import Base


def create_tables(engine: Engine):
    """Create all database tables."""
    Base.metadata.create_all(bind=engine)


def instantiate_db(engine: Engine):
    """Initialize database tables."""
    create_tables(engine)
    return True
