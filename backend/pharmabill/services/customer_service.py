"""Customer (party) read/create."""
import re
import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from pharmabill.models.customer import Customer
from pharmabill.schemas.customer import CustomerCreate, CustomerRecord

logger = logging.getLogger(__name__)


def sanitize_customer_name(name: str) -> str:
    """Collapse whitespace and strip control characters. Raises on empty names."""
    if not name:
        raise ValueError("Customer name cannot be empty")

    name = " ".join(str(name).strip().split())
    name = re.sub(r"[\x00-\x1f\x7f]", "", name)
    name = name[:255]

    if not name:
        raise ValueError("Customer name cannot be empty")
    return name


def build_search_index(name: str, gstin: Optional[str], mobile: Optional[str]) -> List[str]:
    return [v.lower() for v in (name, gstin or "", mobile or "") if v]


def list_customers(db: Session) -> List[CustomerRecord]:
    rows = db.query(Customer).order_by(Customer.name).all()
    return [CustomerRecord.model_validate(row) for row in rows]


def get_customer(db: Session, customer_id: int) -> Optional[CustomerRecord]:
    row = db.query(Customer).filter(Customer.id == customer_id).first()
    if not row:
        return None
    return CustomerRecord.model_validate(row)


def _to_row(data: CustomerCreate) -> Customer:
    name = sanitize_customer_name(data.name)
    return Customer(
        name=name,
        type=data.type.value,
        mobile=data.mobile or "",
        gstin=data.gstin,
        state_code=data.state_code,
        address=data.address,
        search_index=data.search_index or build_search_index(name, data.gstin, data.mobile),
    )


def create_customer(db: Session, data: CustomerCreate) -> CustomerRecord:
    row = _to_row(data)
    db.add(row)
    db.commit()
    db.refresh(row)
    return CustomerRecord.model_validate(row)


def save_customers(db: Session, customers: Iterable[CustomerCreate]) -> int:
    """Bulk insert (spreadsheet import). Returns number of rows written."""
    rows = [_to_row(c) for c in customers]
    db.add_all(rows)
    db.commit()
    logger.info(f"[Customers] Saved {len(rows)} customers")
    return len(rows)
