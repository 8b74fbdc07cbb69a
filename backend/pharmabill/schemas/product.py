from enum import Enum
from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal


class Schedule(str, Enum):
    """Drug schedule under Indian pharmaceutical law."""
    GENERAL = "General"
    H = "H"
    H1 = "H1"
    X = "X"


class ProductRecord(BaseModel):
    """Read-only view of one catalog batch, as the billing engine sees it."""
    id: Optional[int] = None
    name: str
    batch: str = ""
    expiry: Optional[str] = None  # YYYY-MM-DD
    mrp: Decimal = Decimal("0")
    rate: Decimal = Decimal("0")  # Billing rate, usually PTR
    ptr: Decimal = Decimal("0")
    pts: Decimal = Decimal("0")
    stock: int = 0
    manufacturer: str = ""
    hsn: str = ""
    gst_percent: Decimal = Decimal("12")
    schedule: Schedule = Schedule.GENERAL

    class Config:
        from_attributes = True
        frozen = True

    @property
    def key(self):
        """Identity used to merge cart lines."""
        return self.id if self.id is not None else (self.name, self.batch)


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)
    batch: str = ""
    expiry: Optional[str] = None
    mrp: Decimal = Field(..., ge=0)
    gst_percent: Decimal = Field(Decimal("12"), ge=0)
    # Derived from MRP when omitted
    ptr: Optional[Decimal] = Field(None, ge=0)
    pts: Optional[Decimal] = Field(None, ge=0)
    rate: Optional[Decimal] = Field(None, ge=0)
    stock: int = Field(0, ge=0)
    manufacturer: str = ""
    hsn: str = ""
    schedule: Schedule = Schedule.GENERAL


class ProductListItem(ProductRecord):
    near_expiry: bool = False


class PricingPreview(BaseModel):
    mrp: Decimal
    gst_percent: Decimal
    retailer_margin_percent: Decimal
    stockist_margin_percent: Decimal
    ptr: Decimal
    pts: Decimal
