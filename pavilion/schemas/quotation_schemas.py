# pavilion/schemas/quotation_schemas.py
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import date, datetime
from typing_extensions import Annotated, Literal

from pavilion.services.pricing_services.line_item_builder import LineItem, BuilderNotice
from pavilion.services.pricing_services.totals import DocumentTotals

QuotationStatus = Literal["draft", "sent", "cancelled"]
NonNegativeDecimal = Annotated[Decimal, Field(ge=0)]


# --------------------------
# Quotation Item Schemas
# --------------------------
class QuotationItemIn(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=0)
    custom_price: Optional[Decimal] = None  # overrides the tier price, discount is back-solved
    discount: Optional[Decimal] = None      # markup% / discount% depending on the line's price mode
    is_detailed: bool = False


class QuotationItemOut(BaseModel):
    id: int
    position: int
    product_id: int
    product_name: str
    sku: Optional[str] = None
    slug: Optional[str] = None
    category_name: Optional[str] = None
    sub_category_name: Optional[str] = None
    brand_name: Optional[str] = None
    image_url: Optional[str] = None
    mrp: Decimal
    dealer_price: Optional[Decimal] = None
    base_price: Decimal
    price_mode: str
    discount: Decimal
    unit_price: Decimal
    quantity: int
    gst_rate: Decimal
    line_total: Decimal
    is_detailed: bool

    class Config:
        from_attributes = True


# --------------------------
# Quotation Schemas
# --------------------------
class QuotationCreate(BaseModel):
    customer_id: int
    items: List[QuotationItemIn] = []
    product_ids: List[int] = []  # "Add N items": appended at tier price, quantity 1
    status: QuotationStatus = "draft"
    reference_number: Optional[str] = None
    issue_date: Optional[date] = None
    valid_until: Optional[date] = None
    payment_terms: Optional[str] = None
    delivery_terms: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    notes: Optional[str] = None
    show_total: bool = True
    tax_rate: Optional[NonNegativeDecimal] = None
    discount_value: Optional[NonNegativeDecimal] = None


class QuotationUpdate(BaseModel):
    status: Optional[QuotationStatus] = None
    notes: Optional[str] = None
    items: Optional[List[QuotationItemIn]] = None  # present = full snapshot replacement
    customer_id: Optional[int] = None
    reference_number: Optional[str] = None
    valid_until: Optional[date] = None
    payment_terms: Optional[str] = None
    delivery_terms: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    show_total: Optional[bool] = None
    tax_rate: Optional[NonNegativeDecimal] = None
    discount_value: Optional[NonNegativeDecimal] = None


class QuotationStatusUpdate(BaseModel):
    status: QuotationStatus


class QuotationPreviewRequest(BaseModel):
    customer_id: Optional[int] = None
    items: List[QuotationItemIn] = []
    product_ids: List[int] = []
    tax_rate: Optional[NonNegativeDecimal] = None


class QuotationOut(BaseModel):
    id: int
    quotation_number: str
    reference_number: Optional[str] = None
    status: str
    customer_id: int
    customer_snapshot: Optional[dict] = None
    issue_date: Optional[date] = None
    valid_until: Optional[date] = None
    payment_terms: Optional[str] = None
    delivery_terms: Optional[str] = None
    terms_and_conditions: Optional[str] = None
    notes: Optional[str] = None
    show_total: bool
    tax_rate: Decimal
    subtotal: Decimal
    tax: Decimal
    discount_value: Decimal
    shipping_cost: Decimal
    total_amount: Decimal
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    items: List[QuotationItemOut] = []

    class Config:
        from_attributes = True


# --------------------------
# Response Schemas
# --------------------------
class QuotationResponse(BaseModel):
    message: str
    data: Optional[QuotationOut] = None


class QuotationListResponse(BaseModel):
    message: str
    total: int = 0
    data: List[QuotationOut] = []


class QuotationPreviewOut(BaseModel):
    items: List[LineItem]
    totals: DocumentTotals
    notices: List[BuilderNotice] = []


class QuotationPreviewResponse(BaseModel):
    message: str
    data: QuotationPreviewOut
