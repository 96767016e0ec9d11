# pavilion/services/sales_services/customer_service.py
import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException

from pavilion.models.customer_models import Customer, CustomerContact, CustomerType
from pavilion.models.user_models import User
from pavilion.schemas.customer_schemas import (
    CustomerCreate,
    CustomerUpdate,
    CustomerStatusUpdate,
    CustomerOut,
    CustomerResponse,
    CustomerListResponse,
    PricingTierOut,
    PricingTierResponse,
)
from pavilion.services.pricing_services.calculator import resolve_tier, BasePriceType
from pavilion.utils.activity_helpers import log_activity

logger = logging.getLogger(__name__)

# Columns a partial update may not clear
REQUIRED_FIELDS = {"name", "is_active"}


# --------------------------
# Helpers
# --------------------------
async def _reload(db: AsyncSession, customer_id: int) -> Customer:
    result = await db.execute(
        select(Customer).where(Customer.id == customer_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _check_customer_type(db: AsyncSession, type_id: Optional[int]):
    if type_id is not None and not await db.get(CustomerType, type_id):
        raise HTTPException(status_code=404, detail=f"Customer type {type_id} not found")


def _contacts(payload) -> list:
    contacts = [CustomerContact(**c.model_dump()) for c in payload]
    # At most one primary contact; first flagged one wins
    primary_seen = False
    for contact in contacts:
        if contact.is_primary and not primary_seen:
            primary_seen = True
        else:
            contact.is_primary = False
    return contacts


async def get_customer_or_404(db: AsyncSession, customer_id: int, active_only: bool = True) -> Customer:
    customer = await db.get(Customer, customer_id)
    if not customer or (active_only and not customer.is_active):
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found")
    return customer


async def get_customer_for_user(db: AsyncSession, user) -> Customer:
    result = await db.execute(select(Customer).where(Customer.user_id == user.id))
    customer = result.scalars().first()
    if not customer:
        raise HTTPException(status_code=404, detail="No customer account is linked to this user")
    return customer


# --------------------------
# CREATE
# --------------------------
async def create_customer(db: AsyncSession, data: CustomerCreate, current_user) -> CustomerResponse:
    await _check_customer_type(db, data.customer_type_id)

    payload = data.model_dump(exclude={"contacts"})
    if payload.get("base_price_type") is not None:
        payload["base_price_type"] = payload["base_price_type"].value

    customer = Customer(**payload, status="approved", created_by=current_user.id, updated_by=current_user.id)
    customer.contacts = _contacts(data.contacts)

    try:
        db.add(customer)
        await db.flush()
        await log_activity(
            db,
            event_type="customer_created",
            description=f"Customer '{customer.name}' created by {current_user.email}.",
            admin_id=current_user.id,
            customer_id=customer.id,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Customer with this email already exists.")

    customer = await _reload(db, customer.id)
    return CustomerResponse(message="Customer created successfully", data=CustomerOut.model_validate(customer))


# --------------------------
# LIST / GET
# --------------------------
async def list_customers(
    db: AsyncSession,
    page: int = 1,
    page_size: int = 20,
    search: Optional[str] = None,
    status: Optional[str] = None,
    customer_type_id: Optional[int] = None,
    include_inactive: bool = False,
) -> CustomerListResponse:
    conditions = []
    if not include_inactive:
        conditions.append(Customer.is_active == True)  # noqa: E712
    if status:
        conditions.append(Customer.status == status)
    if customer_type_id:
        conditions.append(Customer.customer_type_id == customer_type_id)
    if search:
        like = f"%{search}%"
        conditions.append(
            or_(Customer.name.ilike(like), Customer.company_name.ilike(like), Customer.email.ilike(like), Customer.phone.ilike(like))
        )

    total = (await db.execute(select(func.count(Customer.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Customer)
        .where(*conditions)
        .order_by(Customer.name, Customer.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    customers = result.scalars().all()

    return CustomerListResponse(
        message="Customers retrieved successfully",
        total=total,
        data=[CustomerOut.model_validate(c) for c in customers],
        warning=None if customers else "No customers match the given filters",
    )


async def get_customer(db: AsyncSession, customer_id: int) -> CustomerResponse:
    customer = await get_customer_or_404(db, customer_id, active_only=False)
    return CustomerResponse(message="Customer retrieved successfully", data=CustomerOut.model_validate(customer))


# --------------------------
# UPDATE
# --------------------------
async def update_customer(db: AsyncSession, customer_id: int, data: CustomerUpdate, current_user) -> CustomerResponse:
    customer = await get_customer_or_404(db, customer_id, active_only=False)
    changes = data.model_dump(exclude_unset=True, exclude={"contacts"})
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}

    if "customer_type_id" in changes:
        await _check_customer_type(db, changes["customer_type_id"])
    if changes.get("base_price_type") is not None:
        changes["base_price_type"] = changes["base_price_type"].value

    for key, value in changes.items():
        setattr(customer, key, value)
    if data.contacts is not None:
        customer.contacts = _contacts(data.contacts)
    customer.updated_by = current_user.id

    await log_activity(
        db,
        event_type="customer_updated",
        description=f"Customer '{customer.name}' updated by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=customer.id,
        metadata={"fields": sorted(changes.keys()) + (["contacts"] if data.contacts is not None else [])},
    )
    await db.commit()

    customer = await _reload(db, customer.id)
    return CustomerResponse(message="Customer updated successfully", data=CustomerOut.model_validate(customer))


# --------------------------
# SOFT DELETE
# --------------------------
async def delete_customer(db: AsyncSession, customer_id: int, current_user) -> CustomerResponse:
    customer = await get_customer_or_404(db, customer_id)
    customer.is_active = False
    customer.updated_by = current_user.id

    await log_activity(
        db,
        event_type="customer_deleted",
        description=f"Customer '{customer.name}' deactivated by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=customer.id,
    )
    await db.commit()
    return CustomerResponse(message="Customer deleted successfully", data=None)


# --------------------------
# B2B APPROVAL
# --------------------------
async def update_customer_status(db: AsyncSession, customer_id: int, data: CustomerStatusUpdate, current_user) -> CustomerResponse:
    customer = await get_customer_or_404(db, customer_id)
    if customer.status == data.status:
        raise HTTPException(status_code=400, detail=f"Customer is already {data.status}")

    if data.customer_type_id is not None:
        await _check_customer_type(db, data.customer_type_id)
        customer.customer_type_id = data.customer_type_id

    previous = customer.status
    customer.status = data.status
    customer.updated_by = current_user.id

    if customer.user_id:
        user = await db.get(User, customer.user_id)
        if user:
            user.is_active = data.status == "approved"
            if data.status != "approved":
                user.token_version += 1

    await log_activity(
        db,
        event_type=f"customer_{data.status}",
        description=f"Customer '{customer.name}' moved from {previous} to {data.status} by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=customer.id,
        metadata={"from": previous, "to": data.status},
    )
    await db.commit()
    logger.info("Customer %s status %s -> %s", customer.id, previous, data.status)

    customer = await _reload(db, customer.id)
    return CustomerResponse(message=f"Customer {data.status} successfully", data=CustomerOut.model_validate(customer))


# --------------------------
# PRICING TIER
# --------------------------
def describe_tier(customer: Customer) -> PricingTierOut:
    tier = resolve_tier(customer)
    if tier is None:
        return PricingTierOut(
            customer_id=customer.id,
            source="none",
            description="No pricing tier; best available price is used",
        )

    source = "customer" if customer.base_price_type else "customer_type"
    if tier.base_price_type == BasePriceType.dealer:
        description = f"Dealer price + {tier.percentage}%"
    else:
        description = f"MRP - {tier.percentage}%"
    return PricingTierOut(
        customer_id=customer.id,
        base_price_type=tier.base_price_type,
        percentage=tier.percentage,
        source=source,
        description=description,
    )


async def get_customer_pricing(db: AsyncSession, customer_id: int) -> PricingTierResponse:
    customer = await get_customer_or_404(db, customer_id, active_only=False)
    return PricingTierResponse(message="Pricing tier resolved successfully", data=describe_tier(customer))
