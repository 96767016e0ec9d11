from pydantic import BaseModel, EmailStr, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime
from typing_extensions import Annotated, Literal

from pavilion.services.pricing_services.calculator import BasePriceType

TierPercentage = Annotated[Decimal, Field(ge=0, max_digits=6, decimal_places=2)]
CustomerStatus = Literal["pending", "approved", "rejected"]


# --------------------------
# Customer types
# --------------------------
class CustomerTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    base_price_type: BasePriceType = BasePriceType.mrp
    percentage: TierPercentage = Decimal("0")


class CustomerTypeUpdate(BaseModel):
    name: Optional[str] = None
    base_price_type: Optional[BasePriceType] = None
    percentage: Optional[TierPercentage] = None


class CustomerTypeOut(BaseModel):
    id: int
    name: str
    base_price_type: BasePriceType
    percentage: Decimal

    class Config:
        from_attributes = True


class CustomerTypeResponse(BaseModel):
    message: str
    data: Optional[CustomerTypeOut] = None


class CustomerTypeListResponse(BaseModel):
    message: str
    data: List[CustomerTypeOut] = []


# --------------------------
# Contacts
# --------------------------
class CustomerContactIn(BaseModel):
    name: str
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    is_primary: bool = False


class CustomerContactOut(CustomerContactIn):
    id: int
    email: Optional[str] = None

    class Config:
        from_attributes = True


# --------------------------
# Customers
# --------------------------
class CustomerBase(BaseModel):
    name: str
    email: EmailStr
    company_name: Optional[str] = None
    phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    customer_type_id: Optional[int] = None
    base_price_type: Optional[BasePriceType] = None
    percentage: Optional[TierPercentage] = None


class CustomerCreate(CustomerBase):
    contacts: List[CustomerContactIn] = []


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    company_name: Optional[str] = None
    phone: Optional[str] = None
    gst_number: Optional[str] = None
    address: Optional[str] = None
    customer_type_id: Optional[int] = None
    base_price_type: Optional[BasePriceType] = None
    percentage: Optional[TierPercentage] = None
    is_active: Optional[bool] = None
    contacts: Optional[List[CustomerContactIn]] = None


class CustomerStatusUpdate(BaseModel):
    status: CustomerStatus
    customer_type_id: Optional[int] = None


class CustomerOut(CustomerBase):
    id: int
    email: str
    status: str
    is_active: bool
    customer_type_name: Optional[str] = None
    contacts: List[CustomerContactOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class CustomerResponse(BaseModel):
    message: str
    data: Optional[CustomerOut] = None


class CustomerListResponse(BaseModel):
    message: str
    total: int
    data: List[CustomerOut]
    warning: Optional[str] = None


class PricingTierOut(BaseModel):
    customer_id: int
    base_price_type: Optional[BasePriceType] = None
    percentage: Optional[Decimal] = None
    source: str  # customer | customer_type | none
    description: str


class PricingTierResponse(BaseModel):
    message: str
    data: PricingTierOut
