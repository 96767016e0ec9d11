# pavilion/services/sales_services/order_service.py
import logging
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from fastapi import HTTPException

from pavilion.core.config import DEFAULT_TAX_RATE, ORDER_PREFIX
from pavilion.models.order_models import Order, OrderItem
from pavilion.models.customer_models import Customer
from pavilion.schemas.order_schemas import (
    OrderItemIn,
    OrderCreate,
    AdminOrderCreate,
    OrderUpdate,
    OrderOut,
    OrderResponse,
    OrderListResponse,
)
from pavilion.services.catalog_services.product_service import get_product_or_404
from pavilion.services.pricing_services.calculator import resolve_tier, PricingTier
from pavilion.services.pricing_services.line_item_builder import LineItem, add_product, update_quantity, update_discount_or_price
from pavilion.services.pricing_services.totals import compute_totals, stored_totals, DocumentTotals
from pavilion.services.sales_services.customer_service import get_customer_for_user
from pavilion.utils.activity_helpers import log_activity
from pavilion.utils.numbering import generate_document_number

logger = logging.getLogger(__name__)

ORDER_FLOW = ["pending", "approved", "processing", "shipped", "completed"]
TERMINAL_STATUSES = {"completed", "cancelled"}


# --------------------------
# Helpers
# --------------------------
def allowed_transitions(current: str) -> set:
    if current in TERMINAL_STATUSES:
        return set()
    allowed = {"cancelled"}
    position = ORDER_FLOW.index(current)
    if position + 1 < len(ORDER_FLOW):
        allowed.add(ORDER_FLOW[position + 1])
    return allowed


def check_transition(current: str, new: str):
    if new not in allowed_transitions(current):
        raise HTTPException(status_code=400, detail=f"Cannot change order status from '{current}' to '{new}'")


async def _reload(db: AsyncSession, order_id: int) -> Order:
    result = await db.execute(
        select(Order).where(Order.id == order_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_order_or_404(db: AsyncSession, order_id: int) -> Order:
    order = await db.get(Order, order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


async def build_order_lines(
    db: AsyncSession, entries: List[OrderItemIn], tier: Optional[PricingTier], allow_price_override: bool = False
) -> List[LineItem]:
    items: List[LineItem] = []
    for entry in entries:
        product = await get_product_or_404(db, entry.product_id)
        result = add_product(items, product, tier)
        if result.notice:
            raise HTTPException(status_code=400, detail=f"Product '{product.name}' appears more than once in the order")
        items = result.items
        index = len(items) - 1
        try:
            items = update_quantity(items, index, entry.quantity)
            if allow_price_override and entry.unit_price is not None:
                items = update_discount_or_price(items, index, "custom_price", entry.unit_price)
        except (IndexError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))
    return items


def _item_rows(items: List[LineItem]) -> List[OrderItem]:
    return [
        OrderItem(
            product_id=item.product_id,
            product_name=item.name,
            sku=item.sku,
            mrp=item.mrp,
            discount=item.discount,
            unit_price=item.custom_price,
            quantity=item.quantity,
            line_total=item.line_total,
        )
        for item in items
    ]


def _apply_totals(order: Order, totals: DocumentTotals):
    totals = stored_totals(totals)
    order.tax_rate = totals.tax_rate
    order.subtotal = totals.subtotal
    order.discount = totals.discount
    order.tax = totals.tax
    order.total = totals.total


async def _create(db: AsyncSession, customer: Customer, items: List[LineItem], notes: Optional[str], created_by: int) -> Order:
    totals = compute_totals(items, DEFAULT_TAX_RATE)
    order = Order(
        order_number=await generate_document_number(db, Order, ORDER_PREFIX),
        customer_id=customer.id,
        status="pending",
        notes=notes,
        created_by=created_by,
    )
    _apply_totals(order, totals)
    order.items = _item_rows(items)
    db.add(order)
    await db.flush()
    return order


# --------------------------
# B2B: PLACE ORDER
# --------------------------
async def place_order(db: AsyncSession, data: OrderCreate, current_user) -> OrderResponse:
    customer = await get_customer_for_user(db, current_user)
    if not customer.is_active or customer.status != "approved":
        raise HTTPException(status_code=403, detail="Your B2B account is not approved for ordering yet")

    items = await build_order_lines(db, data.items, resolve_tier(customer))

    try:
        order = await _create(db, customer, items, data.notes, current_user.id)
        await log_activity(
            db,
            event_type="order_placed",
            description=f"Order '{order.order_number}' placed by '{customer.name}'.",
            customer_id=customer.id,
            order_id=order.id,
            metadata={"items": len(items), "total": str(order.total)},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Failed to place order for customer %s", customer.id)
        raise HTTPException(status_code=500, detail="An unexpected error occurred while placing the order.")

    logger.info("Order %s placed by customer %s", order.order_number, customer.id)
    order = await _reload(db, order.id)
    return OrderResponse(message="Order placed successfully", data=OrderOut.model_validate(order))


# --------------------------
# ADMIN: CREATE ORDER
# --------------------------
async def create_order(db: AsyncSession, data: AdminOrderCreate, current_user) -> OrderResponse:
    customer = await db.get(Customer, data.customer_id)
    if not customer or not customer.is_active:
        raise HTTPException(status_code=404, detail=f"Customer {data.customer_id} not found or is inactive")

    items = await build_order_lines(db, data.items, resolve_tier(customer), allow_price_override=True)

    try:
        order = await _create(db, customer, items, data.notes, current_user.id)
        await log_activity(
            db,
            event_type="order_created",
            description=f"Order '{order.order_number}' created for '{customer.name}' by {current_user.email}.",
            admin_id=current_user.id,
            customer_id=customer.id,
            order_id=order.id,
            metadata={"items": len(items), "total": str(order.total)},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Failed to create order for customer %s", customer.id)
        raise HTTPException(status_code=500, detail="An unexpected error occurred while creating the order.")

    order = await _reload(db, order.id)
    return OrderResponse(message="Order created successfully", data=OrderOut.model_validate(order))


# --------------------------
# LIST / GET
# --------------------------
async def list_orders(
    db: AsyncSession,
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> OrderListResponse:
    conditions = []
    if status:
        conditions.append(Order.status == status)
    if customer_id:
        conditions.append(Order.customer_id == customer_id)
    if search:
        conditions.append(Order.order_number.ilike(f"%{search}%"))

    total = (await db.execute(select(func.count(Order.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Order)
        .where(*conditions)
        .order_by(Order.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return OrderListResponse(
        message="Orders retrieved successfully",
        total=total,
        data=[OrderOut.model_validate(o) for o in result.scalars().all()],
    )


async def list_customer_orders(db: AsyncSession, current_user, page: int = 1, page_size: int = 20) -> OrderListResponse:
    customer = await get_customer_for_user(db, current_user)
    return await list_orders(db, customer_id=customer.id, page=page, page_size=page_size)


async def get_order(db: AsyncSession, order_id: int) -> OrderResponse:
    order = await get_order_or_404(db, order_id)
    return OrderResponse(message="Order retrieved successfully", data=OrderOut.model_validate(order))


async def get_customer_order(db: AsyncSession, order_id: int, current_user) -> OrderResponse:
    customer = await get_customer_for_user(db, current_user)
    order = await get_order_or_404(db, order_id)
    if order.customer_id != customer.id:
        raise HTTPException(status_code=404, detail="Order not found")
    return OrderResponse(message="Order retrieved successfully", data=OrderOut.model_validate(order))


# --------------------------
# UPDATE
# --------------------------
async def update_order(db: AsyncSession, order_id: int, data: OrderUpdate, current_user) -> OrderResponse:
    """Replace the whole item list; no version check, the last save wins."""
    order = await get_order_or_404(db, order_id)
    if order.status in TERMINAL_STATUSES:
        raise HTTPException(status_code=400, detail=f"Order is {order.status} and can no longer be edited")
    if data.status is not None and data.status != order.status:
        check_transition(order.status, data.status)

    items = await build_order_lines(db, data.items, resolve_tier(order.customer), allow_price_override=True)
    tax_rate = data.tax_rate if data.tax_rate is not None else order.tax_rate

    order.items = _item_rows(items)
    _apply_totals(order, compute_totals(items, tax_rate))
    if data.notes is not None:
        order.notes = data.notes
    previous_status = order.status
    if data.status is not None:
        order.status = data.status
    order.edited_by = current_user.email

    try:
        await log_activity(
            db,
            event_type="order_updated",
            description=f"Order '{order.order_number}' edited by {current_user.email}.",
            admin_id=current_user.id,
            customer_id=order.customer_id,
            order_id=order.id,
            metadata={"items": len(items), "total": str(order.total), "status": {"from": previous_status, "to": order.status}},
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Failed to update order %s", order_id)
        raise HTTPException(status_code=500, detail="An unexpected error occurred while updating the order.")

    order = await _reload(db, order.id)
    return OrderResponse(message="Order updated successfully", data=OrderOut.model_validate(order))


async def update_order_status(db: AsyncSession, order_id: int, status: str, current_user) -> OrderResponse:
    order = await get_order_or_404(db, order_id)
    check_transition(order.status, status)

    previous = order.status
    order.status = status
    order.edited_by = current_user.email
    await log_activity(
        db,
        event_type=f"order_{status}",
        description=f"Order '{order.order_number}' moved from {previous} to {status} by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=order.customer_id,
        order_id=order.id,
        metadata={"from": previous, "to": status},
    )
    await db.commit()

    order = await _reload(db, order.id)
    return OrderResponse(message=f"Order marked as {status}", data=OrderOut.model_validate(order))


# --------------------------
# DELETE
# --------------------------
async def delete_order(db: AsyncSession, order_id: int, current_user) -> OrderResponse:
    order = await get_order_or_404(db, order_id)
    number = order.order_number

    await db.delete(order)
    await log_activity(
        db,
        event_type="order_deleted",
        description=f"Order '{number}' deleted by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=order.customer_id,
        metadata={"order_number": number},
    )
    await db.commit()
    return OrderResponse(message="Order deleted successfully", data=None)
