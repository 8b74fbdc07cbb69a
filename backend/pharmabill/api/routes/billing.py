"""Billing counter: cart events and checkout for one session.

Keyboard bindings on the desktop client:
- F2  -> POST /billing/{session_id}/reset     (new bill)
- F10 -> POST /billing/{session_id}/checkout  (save & print)
"""
import logging

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_billing_session, get_db
from pharmabill.billing.checkout import Refusal, RefusalKind
from pharmabill.billing.compliance import requires_prescriber_record
from pharmabill.billing.fefo import is_near_expiry
from pharmabill.billing.pricing import round_money, to_decimal
from pharmabill.billing.session import BillingSession
from pharmabill.core.config import settings
from pharmabill.core.exceptions import BusinessError
from pharmabill.schemas.billing import (
    AddLineRequest, BindCustomerRequest, CartLineView, CartView, CheckoutResponse,
    ComplianceUpdate, ComplianceView, QuantityUpdate,
)
from pharmabill.schemas.product import ProductListItem
from pharmabill.services import customer_service, product_service
from pharmabill.services.pdf_service import generate_invoice_pdf
from pharmabill.services.printer_service import build_receipt

logger = logging.getLogger(__name__)

router = APIRouter()


def cart_view(session: BillingSession) -> CartView:
    with session.lock:
        return _build_cart_view(session)


def _build_cart_view(session: BillingSession) -> CartView:
    cart = session.cart
    record = cart.compliance
    total = cart.total()
    gst_rate = to_decimal(
        settings.ESTIMATED_GST_RATE if session.estimated_gst_rate is None else session.estimated_gst_rate
    )
    return CartView(
        session_id=session.session_id,
        lines=[
            CartLineView(
                index=i,
                product=line.product,
                billed_qty=line.billed_qty,
                free_qty=line.free_qty,
                net_rate=line.net_rate,
                amount=round_money(line.amount),
            )
            for i, line in enumerate(cart)
        ],
        customer=cart.customer,
        compliance=ComplianceView(
            doctor_name=record.doctor_name,
            patient_name=record.patient_name,
            rx_number=record.rx_number,
            required=any(requires_prescriber_record(line.product.schedule) for line in cart),
            complete=record.is_complete(),
        ),
        total=round_money(total),
        estimated_payable=round_money(total * (1 + gst_rate)),
    )


@router.get("/{session_id}/products", response_model=list[ProductListItem])
def pick_products(
    q: str = Query(""),
    limit: int | None = Query(None, ge=1, le=500),
    session: BillingSession = Depends(get_billing_session),
):
    """Product picker: search + FEFO order, nearest expiry first."""
    products = session.search_products(q, limit=limit)
    return [
        ProductListItem(**p.model_dump(), near_expiry=is_near_expiry(p, months=settings.EXPIRY_WARNING_MONTHS))
        for p in products
    ]


@router.get("/{session_id}/cart", response_model=CartView)
def get_cart(session: BillingSession = Depends(get_billing_session)):
    return cart_view(session)


@router.post("/{session_id}/lines", response_model=CartView)
def add_line(
    body: AddLineRequest,
    db: Session = Depends(get_db),
    session: BillingSession = Depends(get_billing_session),
):
    product = product_service.get_product(db, body.product_id)
    if not product:
        raise BusinessError.not_found("Product", f"id={body.product_id}")
    session.add_product(product)
    return cart_view(session)


@router.patch("/{session_id}/lines/{index}", response_model=CartView)
def update_line(index: int, body: QuantityUpdate, session: BillingSession = Depends(get_billing_session)):
    """Set billed or free quantity. Bad values become 0; unknown lines are ignored."""
    session.update_quantity(index, body.field, body.value)
    return cart_view(session)


@router.delete("/{session_id}/lines/{index}", response_model=CartView)
def remove_line(index: int, session: BillingSession = Depends(get_billing_session)):
    session.remove_line(index)
    return cart_view(session)


@router.put("/{session_id}/customer", response_model=CartView)
def bind_customer(
    body: BindCustomerRequest,
    db: Session = Depends(get_db),
    session: BillingSession = Depends(get_billing_session),
):
    customer = None
    if body.customer_id is not None:
        customer = customer_service.get_customer(db, body.customer_id)
        if not customer:
            raise BusinessError.not_found("Customer", f"id={body.customer_id}")
    session.bind_customer(customer)
    return cart_view(session)


@router.put("/{session_id}/compliance", response_model=CartView)
def update_compliance(body: ComplianceUpdate, session: BillingSession = Depends(get_billing_session)):
    session.update_compliance(**body.model_dump())
    return cart_view(session)


@router.post("/{session_id}/reset", response_model=CartView)
def new_bill(session: BillingSession = Depends(get_billing_session)):
    session.new_bill()
    return cart_view(session)


@router.post("/{session_id}/checkout", response_model=CheckoutResponse)
def checkout(session: BillingSession = Depends(get_billing_session)):
    """Finalize the bill. 400 when empty, 428 until H1 prescriber details are given."""
    result = session.checkout()
    if isinstance(result, Refusal):
        if result.kind is RefusalKind.COMPLIANCE_REQUIRED:
            raise BusinessError.compliance_required(result.detail)
        raise BusinessError.bad_request(result.detail)
    return CheckoutResponse(invoice=result, delivery=session.last_delivery)


def _last_invoice(session: BillingSession):
    if session.last_invoice is None:
        raise BusinessError.not_found("Invoice", f"no checkout yet in {session.session_id}")
    return session.last_invoice


@router.get("/{session_id}/last-invoice/receipt")
def last_receipt(session: BillingSession = Depends(get_billing_session)):
    """Raw ESC/POS bytes for reprinting the last bill."""
    invoice = _last_invoice(session)
    return Response(content=build_receipt(invoice), media_type="application/octet-stream")


@router.get("/{session_id}/last-invoice/pdf")
def last_invoice_pdf(session: BillingSession = Depends(get_billing_session)):
    invoice = _last_invoice(session)
    try:
        buffer = generate_invoice_pdf(invoice)
    except Exception as e:
        raise BusinessError.server_error(e)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={invoice.number}.pdf"},
    )
