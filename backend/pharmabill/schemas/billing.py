from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from decimal import Decimal

from pharmabill.billing.checkout import Invoice
from pharmabill.schemas.customer import CustomerRecord
from pharmabill.schemas.product import ProductRecord


class AddLineRequest(BaseModel):
    product_id: int


class QuantityUpdate(BaseModel):
    field: str  # billed | free
    value: Any = None  # Normalised by the cart, never rejected


class ComplianceUpdate(BaseModel):
    doctor_name: Optional[str] = None
    patient_name: Optional[str] = None
    rx_number: Optional[str] = None


class BindCustomerRequest(BaseModel):
    customer_id: Optional[int] = None  # None unbinds (cash sale)


class CartLineView(BaseModel):
    index: int
    product: ProductRecord
    billed_qty: int
    free_qty: int
    net_rate: Decimal
    amount: Decimal


class ComplianceView(BaseModel):
    doctor_name: str
    patient_name: str
    rx_number: str
    required: bool  # Cart holds Schedule H1 lines
    complete: bool


class CartView(BaseModel):
    session_id: str
    lines: List[CartLineView]
    customer: Optional[CustomerRecord] = None
    compliance: ComplianceView
    total: Decimal
    estimated_payable: Decimal


class CheckoutResponse(BaseModel):
    invoice: Invoice
    delivery: Dict[str, bool]


class InvoiceSummary(BaseModel):
    number: str
    customer_name: str
    date: str
    payable_amount: Decimal
    schedule_h1: bool
