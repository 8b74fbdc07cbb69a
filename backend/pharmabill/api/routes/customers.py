"""Customers (parties): search, create, spreadsheet import."""
from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_db
from pharmabill.core.audit import AuditLog
from pharmabill.core.config import settings
from pharmabill.core.exceptions import BusinessError
from pharmabill.schemas.customer import CustomerCreate, CustomerImportSummary, CustomerRecord, CustomerType
from pharmabill.services import customer_service
from pharmabill.services.customer_import import parse_customer_file
from pharmabill.services.search_service import MODE_THRESHOLDS, search_customers

router = APIRouter()


@router.get("", response_model=list[CustomerRecord])
def list_customers(
    q: str = Query(""),
    mode: str = Query(settings.DEFAULT_SEARCH_MODE),
    db: Session = Depends(get_db),
):
    if mode not in MODE_THRESHOLDS:
        raise BusinessError.bad_request(f"Unknown search mode: {mode}")
    customers = customer_service.list_customers(db)
    if q:
        return search_customers(customers, q, mode)
    return customers


@router.post("", response_model=CustomerRecord)
def create_customer(body: CustomerCreate, db: Session = Depends(get_db)):
    try:
        return customer_service.create_customer(db, body)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))


@router.post("/import", response_model=CustomerImportSummary)
async def import_customers(
    file: UploadFile = File(...),
    customer_type: CustomerType = Form(CustomerType.RETAIL),
    db: Session = Depends(get_db),
):
    """Bulk import parties from the first sheet of an Excel/CSV file."""
    content = await file.read()
    try:
        customers, skipped = parse_customer_file(content, customer_type, filename=file.filename)
    except ValueError as e:
        raise BusinessError.bad_request(str(e))

    imported = customer_service.save_customers(db, customers)
    AuditLog.log_customer_import(file.filename or "upload", customer_type.value, imported, skipped)
    return CustomerImportSummary(
        source=file.filename or "upload",
        customer_type=customer_type,
        imported=imported,
        skipped=skipped,
    )
