# pavilion/routers/sales/orders_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.order_schemas import (
    AdminOrderCreate,
    OrderUpdate,
    OrderStatusUpdate,
    OrderResponse,
    OrderListResponse,
)
from pavilion.services.sales_services.order_service import (
    create_order,
    list_orders,
    get_order,
    update_order,
    update_order_status,
    delete_order,
)
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/orders", tags=["Orders"])


@router.post("/", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_order_route(data: AdminOrderCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await create_order(db, data, _user)


@router.get("/", response_model=OrderListResponse)
@require_role(ADMIN_ROLES)
async def list_orders_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    status: Optional[str] = Query(None),
    customer_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await list_orders(db, status, customer_id, search, page, page_size)


@router.get("/{order_id}", response_model=OrderResponse)
@require_role(ADMIN_ROLES)
async def get_order_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_order(db, order_id)


@router.put("/{order_id}", response_model=OrderResponse)
@require_role(ADMIN_ROLES)
async def update_order_route(
    order_id: int, data: OrderUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_order(db, order_id, data, _user)


@router.patch("/{order_id}/status", response_model=OrderResponse)
@require_role(ADMIN_ROLES)
async def update_order_status_route(
    order_id: int, data: OrderStatusUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_order_status(db, order_id, data.status, _user)


@router.delete("/{order_id}", response_model=OrderResponse)
@require_role(ADMIN_ROLES)
async def delete_order_route(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_order(db, order_id, _user)
