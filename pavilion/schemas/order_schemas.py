# pavilion/schemas/order_schemas.py
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime
from typing_extensions import Annotated, Literal

OrderStatus = Literal["pending", "approved", "processing", "shipped", "completed", "cancelled"]
NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]


class OrderItemIn(BaseModel):
    product_id: int
    quantity: int = Field(..., gt=0)
    unit_price: Optional[NonNegativeDecimal] = None  # admin edits only; B2B orders are always tier-priced


class OrderCreate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = None


class AdminOrderCreate(OrderCreate):
    customer_id: int


class OrderUpdate(BaseModel):
    items: List[OrderItemIn] = Field(..., min_length=1)
    notes: Optional[str] = None
    status: Optional[OrderStatus] = None
    tax_rate: Optional[NonNegativeDecimal] = None


class OrderStatusUpdate(BaseModel):
    status: OrderStatus


class OrderItemOut(BaseModel):
    id: int
    product_id: int
    product_name: str
    sku: Optional[str] = None
    mrp: Decimal
    discount: Decimal
    unit_price: Decimal
    quantity: int
    line_total: Decimal

    class Config:
        from_attributes = True


class OrderOut(BaseModel):
    id: int
    order_number: str
    customer_id: int
    status: str
    tax_rate: Decimal
    subtotal: Decimal
    discount: Decimal
    tax: Decimal
    total: Decimal
    notes: Optional[str] = None
    edited_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    items: List[OrderItemOut] = []

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    message: str
    data: Optional[OrderOut] = None


class OrderListResponse(BaseModel):
    message: str
    total: int = 0
    data: List[OrderOut] = []
