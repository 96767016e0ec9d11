# pavilion/routers/storefront/b2b_router.py
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import CUSTOMER_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.customer_schemas import CustomerOut, CustomerResponse, PricingTierResponse
from pavilion.schemas.order_schemas import OrderCreate, OrderResponse, OrderListResponse
from pavilion.schemas.user_schemas import B2BRegistration
from pavilion.services.auth_services.auth_service import register_b2b_customer
from pavilion.services.sales_services.customer_service import get_customer_for_user, describe_tier
from pavilion.services.sales_services.order_service import place_order, list_customer_orders, get_customer_order
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/b2b", tags=["B2B Portal"])


@router.post("/register", response_model=CustomerResponse, status_code=status.HTTP_201_CREATED)
async def register(data: B2BRegistration, db: AsyncSession = Depends(get_db)):
    customer = await register_b2b_customer(db, data)
    return CustomerResponse(
        message="Registration received. Your account will be reviewed by our team.",
        data=CustomerOut.model_validate(customer),
    )


@router.get("/account", response_model=CustomerResponse)
@require_role(CUSTOMER_ROLES)
async def my_account(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    customer = await get_customer_for_user(db, _user)
    return CustomerResponse(message="Account retrieved successfully", data=CustomerOut.model_validate(customer))


@router.get("/pricing", response_model=PricingTierResponse)
@require_role(CUSTOMER_ROLES)
async def my_pricing(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    customer = await get_customer_for_user(db, _user)
    return PricingTierResponse(message="Pricing tier resolved successfully", data=describe_tier(customer))


@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
@require_role(CUSTOMER_ROLES)
async def place_order_route(data: OrderCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await place_order(db, data, _user)


@router.get("/orders", response_model=OrderListResponse)
@require_role(CUSTOMER_ROLES)
async def my_orders(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await list_customer_orders(db, _user, page, page_size)


@router.get("/orders/{order_id}", response_model=OrderResponse)
@require_role(CUSTOMER_ROLES)
async def my_order(order_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_customer_order(db, order_id, _user)
