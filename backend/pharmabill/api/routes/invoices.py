"""Stored invoices: read-only listing and PDF reprint."""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_db
from pharmabill.billing.checkout import Invoice
from pharmabill.core.exceptions import BusinessError
from pharmabill.schemas.billing import InvoiceSummary
from pharmabill.services import invoice_service
from pharmabill.services.pdf_service import generate_invoice_pdf

router = APIRouter()


@router.get("", response_model=list[InvoiceSummary])
def list_invoices(search: str | None = Query(None), db: Session = Depends(get_db)):
    rows = invoice_service.list_invoices(db, search=search)
    return [
        InvoiceSummary(
            number=row.number,
            customer_name=row.customer_name,
            date=row.created_at.strftime("%d %b, %Y") if row.created_at else "",
            payable_amount=row.payable_amount,
            schedule_h1=row.doctor_details is not None,
        )
        for row in rows
    ]


@router.get("/{number}", response_model=Invoice)
def get_invoice(number: str, db: Session = Depends(get_db)):
    invoice = invoice_service.load_invoice(db, number)
    if not invoice:
        raise BusinessError.not_found("Invoice", f"number={number}")
    return invoice


@router.get("/{number}/pdf")
def invoice_pdf(number: str, db: Session = Depends(get_db)):
    invoice = invoice_service.load_invoice(db, number)
    if not invoice:
        raise BusinessError.not_found("Invoice", f"number={number}")
    try:
        buffer = generate_invoice_pdf(invoice)
    except Exception as e:
        raise BusinessError.server_error(e)
    return StreamingResponse(
        buffer,
        media_type="application/pdf",
        headers={"Content-Disposition": f"inline; filename={number}.pdf"},
    )
