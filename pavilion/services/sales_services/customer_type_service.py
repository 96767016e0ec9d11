from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from fastapi import HTTPException

from pavilion.models.customer_models import CustomerType, Customer
from pavilion.schemas.customer_schemas import (
    CustomerTypeCreate,
    CustomerTypeUpdate,
    CustomerTypeOut,
    CustomerTypeResponse,
    CustomerTypeListResponse,
)
from pavilion.utils.activity_helpers import log_activity


async def get_customer_type_or_404(db: AsyncSession, type_id: int) -> CustomerType:
    customer_type = await db.get(CustomerType, type_id)
    if not customer_type:
        raise HTTPException(status_code=404, detail=f"Customer type {type_id} not found")
    return customer_type


async def list_customer_types(db: AsyncSession) -> CustomerTypeListResponse:
    result = await db.execute(select(CustomerType).order_by(CustomerType.name))
    return CustomerTypeListResponse(
        message="Customer types retrieved successfully",
        data=[CustomerTypeOut.model_validate(t) for t in result.scalars().all()],
    )


async def get_customer_type(db: AsyncSession, type_id: int) -> CustomerTypeResponse:
    customer_type = await get_customer_type_or_404(db, type_id)
    return CustomerTypeResponse(message="Customer type retrieved successfully", data=CustomerTypeOut.model_validate(customer_type))


async def create_customer_type(db: AsyncSession, data: CustomerTypeCreate, current_user) -> CustomerTypeResponse:
    customer_type = CustomerType(
        name=data.name,
        base_price_type=data.base_price_type.value,
        percentage=data.percentage,
    )
    try:
        db.add(customer_type)
        await db.flush()
        await log_activity(
            db,
            event_type="customer_type_created",
            description=f"Customer type '{customer_type.name}' ({customer_type.base_price_type} {customer_type.percentage}%) created by {current_user.email}.",
            admin_id=current_user.id,
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Customer type with this name already exists.")

    return CustomerTypeResponse(message="Customer type created successfully", data=CustomerTypeOut.model_validate(customer_type))


async def update_customer_type(db: AsyncSession, type_id: int, data: CustomerTypeUpdate, current_user) -> CustomerTypeResponse:
    customer_type = await get_customer_type_or_404(db, type_id)

    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "base_price_type" in changes:
        changes["base_price_type"] = changes["base_price_type"].value
    for key, value in changes.items():
        setattr(customer_type, key, value)

    try:
        await log_activity(
            db,
            event_type="customer_type_updated",
            description=f"Customer type '{customer_type.name}' updated by {current_user.email}.",
            admin_id=current_user.id,
            metadata={"fields": sorted(changes.keys())},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Customer type with this name already exists.")

    return CustomerTypeResponse(message="Customer type updated successfully", data=CustomerTypeOut.model_validate(customer_type))


async def delete_customer_type(db: AsyncSession, type_id: int, current_user) -> CustomerTypeResponse:
    customer_type = await get_customer_type_or_404(db, type_id)

    assigned = (
        await db.execute(select(func.count(Customer.id)).where(Customer.customer_type_id == type_id))
    ).scalar() or 0
    if assigned:
        raise HTTPException(
            status_code=400,
            detail=f"Customer type '{customer_type.name}' is assigned to {assigned} customer(s) and cannot be deleted",
        )

    await db.delete(customer_type)
    await log_activity(
        db,
        event_type="customer_type_deleted",
        description=f"Customer type '{customer_type.name}' deleted by {current_user.email}.",
        admin_id=current_user.id,
    )
    await db.commit()
    return CustomerTypeResponse(message="Customer type deleted successfully", data=None)
