"""
Invoice aggregation: fold the cart into a finalized, immutable invoice.

checkout() returns either an Invoice or a Refusal. It never raises for
business reasons and never touches the cart; resetting for the next bill is
the caller's decision.
"""
import logging
import uuid
from dataclasses import replace
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple, Union

from pydantic import BaseModel

from pharmabill.billing import compliance
from pharmabill.billing.cart import Cart, CartLine
from pharmabill.billing.pricing import line_amount, net_rate, round_money, to_decimal
from pharmabill.core.config import settings
from pharmabill.schemas.product import ProductRecord

logger = logging.getLogger(__name__)

CASH_SALE = "Cash Sale"


class RefusalKind(str, Enum):
    EMPTY_CART = "EmptyCart"
    COMPLIANCE_REQUIRED = "ComplianceRequired"


class Refusal(BaseModel):
    kind: RefusalKind
    detail: str
    missing_fields: Tuple[str, ...] = ()

    class Config:
        frozen = True


class InvoiceLine(BaseModel):
    product: ProductRecord
    billed_qty: int
    free_qty: int
    net_rate: Decimal
    amount: Decimal

    class Config:
        frozen = True


class DoctorDetails(BaseModel):
    doctor_name: str
    patient_name: str
    rx_number: str = ""

    class Config:
        frozen = True


class Invoice(BaseModel):
    number: str
    customer_id: Optional[int] = None
    customer_name: str = CASH_SALE
    items: Tuple[InvoiceLine, ...]
    total_amount: Decimal  # Taxable
    gst_rate: Decimal  # Flat estimate, not per-line GST
    gst_amount: Decimal
    payable_amount: Decimal
    created_at: datetime
    doctor_details: Optional[DoctorDetails] = None

    class Config:
        frozen = True

    @property
    def requires_prescription(self) -> bool:
        return self.doctor_details is not None


CheckoutResult = Union[Invoice, Refusal]


def new_invoice_number(now: datetime) -> str:
    return f"INV-{now:%Y%m%d-%H%M%S}-{uuid.uuid4().hex[:6].upper()}"


def _invoice_line(line: CartLine) -> InvoiceLine:
    # Quantities are read once so rate and amount agree with them
    billed, free = line.billed_qty, line.free_qty
    return InvoiceLine(
        product=line.product,
        billed_qty=billed,
        free_qty=free,
        net_rate=net_rate(line.product.rate, billed, free),
        amount=round_money(line_amount(line.product.rate, billed)),
    )


def checkout(
    cart: Cart,
    estimated_gst_rate: Optional[Union[Decimal, float, str]] = None,
    now: Optional[datetime] = None,
) -> CheckoutResult:
    """
    Finalize the cart.

    Args:
        cart: Current bill. Read only.
        estimated_gst_rate: Flat rate applied to the taxable total
            (defaults to settings.ESTIMATED_GST_RATE, 12%).
        now: Invoice timestamp (defaults to the current local time).

    Returns:
        Invoice on success, Refusal(EmptyCart | ComplianceRequired) otherwise.
    """
    # Take one copy of the cart up front; nothing below reads the live cart
    lines = cart.lines
    record = replace(cart.compliance)
    customer = cart.customer

    if not lines:
        return Refusal(kind=RefusalKind.EMPTY_CART, detail="Cart is empty")

    items = tuple(_invoice_line(line) for line in lines)

    decision = compliance.evaluate(items, record)
    if not decision.allowed:
        return Refusal(
            kind=RefusalKind.COMPLIANCE_REQUIRED,
            detail=decision.reason,
            missing_fields=decision.missing_fields,
        )

    rate = to_decimal(settings.ESTIMATED_GST_RATE if estimated_gst_rate is None else estimated_gst_rate)
    now = now or datetime.now().astimezone()

    total = round_money(sum((item.amount for item in items), Decimal("0")))
    payable = round_money(total * (1 + rate))

    doctor_details = None
    if decision.requires_record:
        doctor_details = DoctorDetails(
            doctor_name=record.doctor_name.strip(),
            patient_name=record.patient_name.strip(),
            rx_number=(record.rx_number or "").strip(),
        )

    invoice = Invoice(
        number=new_invoice_number(now),
        customer_id=customer.id if customer else None,
        customer_name=customer.name if customer else CASH_SALE,
        items=items,
        total_amount=total,
        gst_rate=rate,
        gst_amount=payable - total,
        payable_amount=payable,
        created_at=now,
        doctor_details=doctor_details,
    )
    logger.info(
        f"[Checkout] {invoice.number}: {len(items)} lines, taxable={total}, "
        f"payable={payable}, customer='{invoice.customer_name}'"
    )
    return invoice
