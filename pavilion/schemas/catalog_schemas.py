# pavilion/schemas/catalog_schemas.py
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional
from datetime import datetime
from typing_extensions import Annotated

NonNegativeDecimal = Annotated[Decimal, Field(ge=0, max_digits=12, decimal_places=2)]
Percentage = Annotated[Decimal, Field(ge=0, le=100, max_digits=5, decimal_places=2)]


# --------------------------
# Taxonomy
# --------------------------
class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None


class SubCategoryCreate(BaseModel):
    category_id: int
    name: str = Field(..., min_length=1, max_length=150)
    slug: Optional[str] = None


class BrandCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    slug: Optional[str] = None
    logo_url: Optional[str] = None


class TagCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: Optional[str] = None


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: Optional[bool] = None


class SubCategoryUpdate(BaseModel):
    category_id: Optional[int] = None
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    slug: Optional[str] = None


class BrandUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    slug: Optional[str] = None
    logo_url: Optional[str] = None


class TagUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    slug: Optional[str] = None


class SubCategoryOut(BaseModel):
    id: int
    category_id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    sub_categories: List[SubCategoryOut] = []

    class Config:
        from_attributes = True


class BrandOut(BaseModel):
    id: int
    name: str
    slug: str
    logo_url: Optional[str] = None

    class Config:
        from_attributes = True


class TagOut(BaseModel):
    id: int
    name: str
    slug: str

    class Config:
        from_attributes = True


# --------------------------
# Products
# --------------------------
class ProductBase(BaseModel):
    sku: str = Field(..., min_length=1, max_length=100)
    name: str = Field(..., min_length=1, max_length=255)
    slug: Optional[str] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    mrp_price: Optional[NonNegativeDecimal] = None
    dealer_price: Optional[NonNegativeDecimal] = None
    shop_price: Optional[NonNegativeDecimal] = None
    gst_rate: Percentage = Decimal("18")
    stock: int = Field(0, ge=0)
    is_quote_hidden: bool = False
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    brand_id: Optional[int] = None
    tag_ids: List[int] = []


class ProductCreate(ProductBase):
    pass


class ProductUpdate(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    images: Optional[List[str]] = None
    mrp_price: Optional[NonNegativeDecimal] = None
    dealer_price: Optional[NonNegativeDecimal] = None
    shop_price: Optional[NonNegativeDecimal] = None
    gst_rate: Optional[Percentage] = None
    stock: Optional[int] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_quote_hidden: Optional[bool] = None
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    brand_id: Optional[int] = None
    tag_ids: Optional[List[int]] = None


class ProductPublicOut(BaseModel):
    """Storefront view: never carries the dealer price."""
    id: int
    sku: str
    name: str
    slug: str
    description: Optional[str] = None
    images: Optional[List[str]] = None
    mrp_price: Optional[Decimal] = None
    shop_price: Optional[Decimal] = None
    gst_rate: Decimal
    stock: int
    category_id: Optional[int] = None
    sub_category_id: Optional[int] = None
    brand_id: Optional[int] = None
    category_name: Optional[str] = None
    sub_category_name: Optional[str] = None
    brand_name: Optional[str] = None
    tags: List[TagOut] = []
    your_price: Optional[Decimal] = None  # tier price for a signed-in, approved B2B customer

    class Config:
        from_attributes = True


class ProductOut(ProductPublicOut):
    dealer_price: Optional[Decimal] = None
    is_active: bool
    is_quote_hidden: bool
    created_at: datetime
    updated_at: Optional[datetime] = None


# --------------------------
# Response Schemas
# --------------------------
class ProductResponse(BaseModel):
    message: str
    data: Optional[ProductOut] = None


class ProductListResponse(BaseModel):
    message: str
    total: int
    page: int
    limit: int
    data: List[ProductOut] = []


class PublicProductResponse(BaseModel):
    message: str
    data: Optional[ProductPublicOut] = None


class PublicProductListResponse(BaseModel):
    message: str
    total: int
    page: int
    limit: int
    data: List[ProductPublicOut] = []


# --------------------------
# Bulk upload
# --------------------------
class ProductBulkRow(BaseModel):
    """One spreadsheet row; taxonomy is given by name and checked per row."""
    sku: Optional[str] = None
    name: Optional[str] = None
    mrp_price: Optional[Decimal] = None
    dealer_price: Optional[Decimal] = None
    shop_price: Optional[Decimal] = None
    gst_rate: Optional[Decimal] = None
    stock: Optional[int] = None
    description: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    brand: Optional[str] = None
    is_active: Optional[bool] = None


class ProductBulkResult(BaseModel):
    created: int = 0
    updated: int = 0
    errors: List[str] = []


class ProductBulkResponse(BaseModel):
    message: str
    data: ProductBulkResult
