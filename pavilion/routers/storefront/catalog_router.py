# pavilion/routers/storefront/catalog_router.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.db import get_db
from pavilion.schemas.catalog_schemas import CategoryOut, BrandOut, PublicProductResponse, PublicProductListResponse
from pavilion.services.catalog_services.taxonomy_service import list_categories, list_brands
from pavilion.services.storefront_services.storefront_service import list_public_products, get_public_product
from pavilion.utils.get_user import get_optional_user

router = APIRouter(tags=["Storefront"])


@router.get("/products", response_model=PublicProductListResponse)
async def browse_products(
    db: AsyncSession = Depends(get_db),
    user=Depends(get_optional_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None, description="Category slug"),
    sub_category_id: Optional[int] = Query(None),
    brand_id: Optional[int] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    return await list_public_products(
        db,
        user=user,
        page=page,
        limit=limit,
        search=search,
        category_slug=category,
        sub_category_id=sub_category_id,
        brand_id=brand_id,
        min_price=min_price,
        max_price=max_price,
        sort_by=sort_by,
        order=order,
    )


@router.get("/products/{slug}", response_model=PublicProductResponse)
async def product_detail(slug: str, db: AsyncSession = Depends(get_db), user=Depends(get_optional_user)):
    return await get_public_product(db, slug, user)


@router.get("/categories", response_model=List[CategoryOut])
async def categories(db: AsyncSession = Depends(get_db)):
    return await list_categories(db)


@router.get("/brands", response_model=List[BrandOut])
async def brands(db: AsyncSession = Depends(get_db)):
    return await list_brands(db)
