"""Create all tables. Run on app startup."""
import logging

from pharmabill.db.base import Base
from pharmabill.db.session import engine
from pharmabill.models import product, customer, invoice  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    Base.metadata.create_all(bind=bind or engine)
    logger.info("[DB] Tables ensured: %s", ", ".join(sorted(Base.metadata.tables)))
