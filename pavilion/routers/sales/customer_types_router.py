# pavilion/routers/sales/customer_types_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.customer_schemas import (
    CustomerTypeCreate,
    CustomerTypeUpdate,
    CustomerTypeResponse,
    CustomerTypeListResponse,
)
from pavilion.services.sales_services.customer_type_service import (
    list_customer_types,
    get_customer_type,
    create_customer_type,
    update_customer_type,
    delete_customer_type,
)
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/customer-types", tags=["Customer Types"])


@router.get("/", response_model=CustomerTypeListResponse)
@require_role(ADMIN_ROLES)
async def list_customer_types_route(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await list_customer_types(db)


@router.get("/{type_id}", response_model=CustomerTypeResponse)
@require_role(ADMIN_ROLES)
async def get_customer_type_route(type_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer_type(db, type_id)


@router.post("/", response_model=CustomerTypeResponse, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_customer_type_route(
    data: CustomerTypeCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await create_customer_type(db, data, _user)


@router.put("/{type_id}", response_model=CustomerTypeResponse)
@require_role(ADMIN_ROLES)
async def update_customer_type_route(
    type_id: int, data: CustomerTypeUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_customer_type(db, type_id, data, _user)


@router.delete("/{type_id}", response_model=CustomerTypeResponse)
@require_role(ADMIN_ROLES)
async def delete_customer_type_route(type_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await delete_customer_type(db, type_id, _user)
