# pavilion/routers/sales/customers_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerStatusUpdate,
    CustomerResponse,
    CustomerListResponse,
    PricingTierResponse,
)
from pavilion.services.sales_services.customer_service import (
    create_customer,
    list_customers,
    get_customer,
    update_customer,
    delete_customer,
    update_customer_status,
    get_customer_pricing,
)
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/customers", tags=["Customers"])


# --------------------------
# CREATE CUSTOMER
# --------------------------
@router.post("/", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_customer_route(data: CustomerCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_customer(db, data, _user)


# --------------------------
# LIST CUSTOMERS
# --------------------------
@router.get("/", response_model=CustomerListResponse)
@require_role(ADMIN_ROLES)
async def list_customers_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None, description="pending | approved | rejected"),
    customer_type_id: Optional[int] = Query(None),
    include_inactive: bool = Query(False),
):
    return await list_customers(db, page, page_size, search, status, customer_type_id, include_inactive)


# --------------------------
# GET CUSTOMER
# --------------------------
@router.get("/{customer_id}", response_model=CustomerResponse)
@require_role(ADMIN_ROLES)
async def get_customer_route(customer_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer(db, customer_id)


@router.get("/{customer_id}/pricing", response_model=PricingTierResponse)
@require_role(ADMIN_ROLES)
async def get_customer_pricing_route(customer_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer_pricing(db, customer_id)


# --------------------------
# UPDATE CUSTOMER
# --------------------------
@router.put("/{customer_id}", response_model=CustomerResponse)
@require_role(ADMIN_ROLES)
async def update_customer_route(
    customer_id: int, data: CustomerUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_customer(db, customer_id, data, _user)


@router.patch("/{customer_id}/status", response_model=CustomerResponse)
@require_role(ADMIN_ROLES)
async def update_customer_status_route(
    customer_id: int, data: CustomerStatusUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_customer_status(db, customer_id, data, _user)


# --------------------------
# DELETE CUSTOMER
# --------------------------
@router.delete("/{customer_id}", response_model=CustomerResponse)
@require_role(ADMIN_ROLES)
async def delete_customer_route(customer_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_customer(db, customer_id, _user)
