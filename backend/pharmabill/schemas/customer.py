from enum import Enum
from pydantic import BaseModel, Field
from typing import List, Optional


class CustomerType(str, Enum):
    WHOLESALE = "wholesale"
    RETAIL = "retail"


class CustomerCreate(BaseModel):
    name: str = Field(..., min_length=1)
    type: CustomerType = CustomerType.RETAIL
    mobile: str = ""
    gstin: Optional[str] = None
    state_code: Optional[str] = None
    address: Optional[str] = None
    search_index: List[str] = Field(default_factory=list)


class CustomerRecord(BaseModel):
    id: Optional[int] = None
    name: str
    type: CustomerType = CustomerType.RETAIL
    mobile: str = ""
    gstin: Optional[str] = None
    state_code: Optional[str] = None
    address: Optional[str] = None

    class Config:
        from_attributes = True
        frozen = True


class CustomerImportSummary(BaseModel):
    source: str
    customer_type: CustomerType
    imported: int
    skipped: int
