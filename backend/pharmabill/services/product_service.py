"""Catalog read/create. The product source for billing sessions."""
import logging
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from pharmabill.billing.pricing import price_from_mrp, price_to_stockist, round_money
from pharmabill.core.config import settings
from pharmabill.models.product import Product
from pharmabill.schemas.product import ProductCreate, ProductRecord

logger = logging.getLogger(__name__)


def list_products(db: Session) -> List[ProductRecord]:
    """Whole catalog in catalog (insertion) order."""
    rows = db.query(Product).order_by(Product.id).all()
    return [ProductRecord.model_validate(row) for row in rows]


def get_product(db: Session, product_id: int) -> Optional[ProductRecord]:
    row = db.query(Product).filter(Product.id == product_id).first()
    if not row:
        return None
    return ProductRecord.model_validate(row)


def create_product(db: Session, data: ProductCreate) -> ProductRecord:
    """
    Add a batch to the catalog.

    PTR and PTS are derived from MRP when the distributor didn't print them;
    the billing rate defaults to PTR.
    """
    ptr = data.ptr if data.ptr is not None else price_from_mrp(
        data.mrp, data.gst_percent, settings.RETAILER_MARGIN_PERCENT
    )
    pts = data.pts if data.pts is not None else price_to_stockist(ptr, settings.STOCKIST_MARGIN_PERCENT)
    rate = data.rate if data.rate is not None else ptr

    row = Product(
        name=data.name.strip(),
        batch=data.batch.strip(),
        expiry=data.expiry,
        mrp=round_money(data.mrp),
        rate=round_money(rate),
        ptr=round_money(ptr),
        pts=round_money(pts),
        stock=data.stock,
        manufacturer=data.manufacturer,
        hsn=data.hsn,
        gst_percent=data.gst_percent,
        schedule=data.schedule.value,
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info(f"[Catalog] Added '{row.name}' batch={row.batch} schedule={row.schedule} rate={row.rate}")
    return ProductRecord.model_validate(row)


class DatabaseProductSource:
    """Callable product source that opens a short-lived DB session per read."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def __call__(self) -> List[ProductRecord]:
        db = self.session_factory()
        try:
            return list_products(db)
        finally:
            db.close()
