"""Invoice storage. The optional storage collaborator for billing sessions."""
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from pharmabill.billing.checkout import Invoice as FinalizedInvoice
from pharmabill.models.invoice import Invoice

logger = logging.getLogger(__name__)


def save_invoice(db: Session, invoice: FinalizedInvoice, auto_commit: bool = True) -> Invoice:
    """
    Persist a finalized invoice.

    Args:
        auto_commit: If True, commits immediately. If False, caller must commit.
    """
    row = Invoice(
        number=invoice.number,
        customer_id=invoice.customer_id,
        customer_name=invoice.customer_name,
        items=[item.model_dump(mode="json") for item in invoice.items],
        total_amount=invoice.total_amount,
        gst_rate=invoice.gst_rate,
        gst_amount=invoice.gst_amount,
        payable_amount=invoice.payable_amount,
        doctor_details=invoice.doctor_details.model_dump() if invoice.doctor_details else None,
        created_at=invoice.created_at,
    )
    db.add(row)
    if auto_commit:
        db.commit()
        db.refresh(row)
    else:
        db.flush()
    logger.info(f"[InvoiceStore] Saved {invoice.number} (id={row.id})")
    return row


def load_invoice(db: Session, number: str) -> Optional[FinalizedInvoice]:
    """Rebuild the finalized invoice from its stored snapshot."""
    row = db.query(Invoice).filter(Invoice.number == number).first()
    if not row:
        return None
    return FinalizedInvoice(
        number=row.number,
        customer_id=row.customer_id,
        customer_name=row.customer_name,
        items=row.items,
        total_amount=row.total_amount,
        gst_rate=row.gst_rate,
        gst_amount=row.gst_amount,
        payable_amount=row.payable_amount,
        created_at=row.created_at,
        doctor_details=row.doctor_details,
    )


def list_invoices(db: Session, search: Optional[str] = None, limit: int = 100) -> List[Invoice]:
    q = db.query(Invoice)
    if search:
        q = q.filter(Invoice.customer_name.ilike(f"%{search}%"))
    return q.order_by(Invoice.created_at.desc()).limit(limit).all()


class DatabaseInvoiceStore:
    """Callable storage collaborator: one DB session per finalized invoice."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def __call__(self, invoice: FinalizedInvoice) -> Invoice:
        db = self.session_factory()
        try:
            return save_invoice(db, invoice)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
