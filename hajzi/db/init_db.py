"""Schema creation for development and demo databases."""

from typing import Optional

from sqlalchemy.engine import Engine

from hajzi.core.logging import get_logger
from hajzi.db.base import Base, import_models

logger = get_logger(__name__)


def init_db(bind: Optional[Engine] = None) -> None:
    """Create missing tables on ``bind`` (the application engine by default)."""
    if bind is None:
        from hajzi.db.session import engine as bind

    import_models()
    Base.metadata.create_all(bind=bind)
    logger.info("Database schema ready", extra={"tables": len(Base.metadata.tables)})
