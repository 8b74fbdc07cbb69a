"""FastAPI dependencies: DB session and the per-counter billing session.

Billing sessions are held in-process, one per session id (one per counter).
Each owns exactly one active cart. At most settings.MAX_BILLING_SESSIONS are
kept; when a new counter shows up, the least recently used idle counter is
dropped. Counters with a bill in progress are never dropped.
"""
import logging
import threading
from collections import OrderedDict
from typing import Callable, Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from pharmabill.billing.session import BillingSession
from pharmabill.core.config import settings
from pharmabill.core.exceptions import BusinessError
from pharmabill.db.session import SessionLocal
from pharmabill.services.invoice_service import DatabaseInvoiceStore
from pharmabill.services.printer_service import ReceiptPrinter
from pharmabill.services.product_service import DatabaseProductSource
from pharmabill.services.search_service import product_searcher

logger = logging.getLogger(__name__)

_billing_sessions: "OrderedDict[str, BillingSession]" = OrderedDict()
_sessions_lock = threading.Lock()


def get_session_factory() -> Callable[[], Session]:
    return SessionLocal


def get_db(session_factory: Callable[[], Session] = Depends(get_session_factory)) -> Generator[Session, None, None]:
    """Get database session."""
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


def _evict_idle_session() -> bool:
    for session_id, session in _billing_sessions.items():
        if session.is_idle():
            del _billing_sessions[session_id]
            logger.info(f"[BillingSessions] Dropped idle counter {session_id}")
            return True
    return False


def get_billing_session(
    session_id: str,
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> BillingSession:
    """Billing session for this counter, created on first use."""
    with _sessions_lock:
        session = _billing_sessions.get(session_id)
        if session is not None:
            _billing_sessions.move_to_end(session_id)
            return session

        if len(_billing_sessions) >= settings.MAX_BILLING_SESSIONS and not _evict_idle_session():
            logger.warning(f"[BillingSessions] Refused counter {session_id}: all {len(_billing_sessions)} counters busy")
            raise BusinessError.too_many_sessions(settings.MAX_BILLING_SESSIONS)

        session = BillingSession(
            session_id=session_id,
            product_source=DatabaseProductSource(session_factory),
            search=product_searcher(settings.DEFAULT_SEARCH_MODE),
            printer=ReceiptPrinter(),
            storage=DatabaseInvoiceStore(session_factory),
        )
        _billing_sessions[session_id] = session
        return session


def clear_billing_sessions() -> None:
    with _sessions_lock:
        _billing_sessions.clear()
