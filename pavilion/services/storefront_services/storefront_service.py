from decimal import Decimal
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pavilion.models.customer_models import Customer
from pavilion.schemas.catalog_schemas import ProductPublicOut, PublicProductResponse, PublicProductListResponse
from pavilion.services.catalog_services.product_service import product_filters, query_products, get_product_by_slug
from pavilion.services.catalog_services.taxonomy_service import get_category_by_slug
from pavilion.services.pricing_services.calculator import resolve_tier, price_product, PricingTier


async def shopper_tier(db: AsyncSession, user) -> Optional[PricingTier]:
    """Tier of the signed-in B2B customer; anonymous or unapproved shoppers get none."""
    if user is None or user.role != "customer":
        return None
    result = await db.execute(select(Customer).where(Customer.user_id == user.id))
    customer = result.scalars().first()
    if not customer or not customer.is_active or customer.status != "approved":
        return None
    return resolve_tier(customer)


def public_product(product, tier: Optional[PricingTier]) -> ProductPublicOut:
    out = ProductPublicOut.model_validate(product)
    if tier is not None:
        out.your_price = price_product(product, tier).custom_price
    return out


async def list_public_products(
    db: AsyncSession,
    user=None,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    category_slug: Optional[str] = None,
    category_id: Optional[int] = None,
    sub_category_id: Optional[int] = None,
    brand_id: Optional[int] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    sort_by: str = "created_at",
    order: str = "desc",
) -> PublicProductListResponse:
    if category_slug:
        category_id = (await get_category_by_slug(db, category_slug)).id

    conditions = product_filters(
        search, category_id, sub_category_id, brand_id, min_price, max_price, include_quote_hidden=False
    )
    total, products = await query_products(db, conditions, page, limit, sort_by, order)
    tier = await shopper_tier(db, user)
    return PublicProductListResponse(
        message="Products retrieved successfully",
        total=total,
        page=page,
        limit=limit,
        data=[public_product(p, tier) for p in products],
    )


async def get_public_product(db: AsyncSession, slug: str, user=None) -> PublicProductResponse:
    product = await get_product_by_slug(db, slug)
    if product.is_quote_hidden:
        raise HTTPException(status_code=404, detail="Product not found")
    tier = await shopper_tier(db, user)
    return PublicProductResponse(message="Product retrieved successfully", data=public_product(product, tier))
