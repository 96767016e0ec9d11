# pavilion/routers/catalog/products_router.py
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.catalog_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    ProductListResponse,
    ProductBulkRow,
    ProductBulkResponse,
)
from pavilion.services.catalog_services.product_service import (
    list_products,
    get_product,
    create_product,
    update_product,
    delete_product,
    bulk_upload_products,
)
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/products", tags=["Products"])


# --------------------------
# LIST PRODUCTS
# --------------------------
@router.get("/", response_model=ProductListResponse)
@require_role(ADMIN_ROLES)
async def list_products_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    category_id: Optional[int] = Query(None),
    sub_category_id: Optional[int] = Query(None),
    brand_id: Optional[int] = Query(None),
    min_price: Optional[Decimal] = Query(None, ge=0),
    max_price: Optional[Decimal] = Query(None, ge=0),
    include_inactive: bool = Query(False),
    include_hidden: bool = Query(True, description="Include products hidden from quotations/storefront"),
    sort_by: str = Query("created_at"),
    order: str = Query("desc"),
):
    return await list_products(
        db,
        page=page,
        limit=limit,
        search=search,
        category_id=category_id,
        sub_category_id=sub_category_id,
        brand_id=brand_id,
        min_price=min_price,
        max_price=max_price,
        include_inactive=include_inactive,
        include_quote_hidden=include_hidden,
        sort_by=sort_by,
        order=order,
    )


# --------------------------
# GET PRODUCT
# --------------------------
@router.get("/{product_id}", response_model=ProductResponse)
@require_role(ADMIN_ROLES)
async def get_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_product(db, product_id)


# --------------------------
# CREATE PRODUCT
# --------------------------
@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_product_route(data: ProductCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_product(db, data, _user)


# --------------------------
# BULK UPLOAD
# --------------------------
@router.post("/bulk", response_model=ProductBulkResponse)
@require_role(ADMIN_ROLES)
async def bulk_upload_route(
    rows: List[ProductBulkRow], db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await bulk_upload_products(db, rows, _user)


# --------------------------
# UPDATE PRODUCT
# --------------------------
@router.put("/{product_id}", response_model=ProductResponse)
@require_role(ADMIN_ROLES)
async def update_product_route(
    product_id: int, data: ProductUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_product(db, product_id, data, _user)


# --------------------------
# DELETE PRODUCT
# --------------------------
@router.delete("/{product_id}", response_model=ProductResponse)
@require_role(ADMIN_ROLES)
async def delete_product_route(product_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_product(db, product_id, _user)
