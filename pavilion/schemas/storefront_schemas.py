from pydantic import BaseModel, EmailStr, Field
from typing import List, Optional, Dict
from datetime import datetime


class EnquiryCreate(BaseModel):
    product_id: Optional[int] = None
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    quantity: Optional[int] = Field(None, gt=0)
    message: Optional[str] = None


class EnquiryStatusUpdate(BaseModel):
    status: str  # new | contacted | closed


class EnquiryOut(BaseModel):
    id: int
    product_id: Optional[int]
    name: str
    email: str
    phone: Optional[str]
    quantity: Optional[int]
    message: Optional[str]
    status: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class EnquiryResponse(BaseModel):
    message: str
    data: Optional[EnquiryOut] = None


class EnquiryListResponse(BaseModel):
    message: str
    total: int
    data: List[EnquiryOut]


class DashboardStats(BaseModel):
    products: int
    customers: int
    pending_b2b_requests: int
    quotations: int
    orders: int
    orders_by_status: Dict[str, int]
    open_enquiries: int


class DashboardResponse(BaseModel):
    message: str
    data: DashboardStats
