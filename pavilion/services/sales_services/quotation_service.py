# pavilion/services/sales_services/quotation_service.py
from datetime import date, timedelta
from decimal import Decimal
import logging
from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from fastapi import HTTPException

from pavilion.core.config import (
    DEFAULT_TAX_RATE,
    QUOTATION_VALID_DAYS,
    QUOTATION_PREFIX,
    DEFAULT_PAYMENT_TERMS,
    DEFAULT_DELIVERY_TERMS,
    COMPANY_LOGO_PATH,
)
from pavilion.models.quotation_models import Quotation, QuotationItem
from pavilion.models.customer_models import Customer
from pavilion.schemas.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationItemIn,
    QuotationPreviewRequest,
    QuotationOut,
    QuotationResponse,
    QuotationListResponse,
    QuotationPreviewOut,
    QuotationPreviewResponse,
)
from pavilion.services.catalog_services.product_service import get_product_or_404
from pavilion.services.document_services.quotation_pdf import (
    render_quotation_pdf,
    build_document_from_quotation,
    customer_block,
)
from pavilion.services.pricing_services.calculator import resolve_tier, PricingTier
from pavilion.services.pricing_services.line_item_builder import (
    LineItem,
    BuilderNotice,
    add_product,
    add_products,
    update_quantity,
    update_discount_or_price,
    toggle_detail,
)
from pavilion.services.pricing_services.totals import compute_totals, stored_totals, DocumentTotals
from pavilion.utils.activity_helpers import log_activity
from pavilion.utils.numbering import generate_document_number

logger = logging.getLogger(__name__)

STATUS_TRANSITIONS = {
    "draft": {"sent", "cancelled"},
    "sent": {"cancelled"},
    "cancelled": set(),
}

# Columns a partial update may not clear; an explicit null leaves them unchanged
REQUIRED_FIELDS = {"show_total", "discount_value"}


# --------------------------
# Helpers
# --------------------------
async def _reload(db: AsyncSession, quotation_id: int) -> Quotation:
    result = await db.execute(
        select(Quotation).where(Quotation.id == quotation_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def get_quotation_or_404(db: AsyncSession, quotation_id: int) -> Quotation:
    quotation = await db.get(Quotation, quotation_id)
    if not quotation:
        raise HTTPException(status_code=404, detail="Quotation not found")
    return quotation


async def _active_customer(db: AsyncSession, customer_id: int) -> Customer:
    customer = await db.get(Customer, customer_id)
    if not customer or not customer.is_active:
        raise HTTPException(status_code=404, detail=f"Customer {customer_id} not found or is inactive")
    return customer


def check_transition(current: str, new: str):
    if new == current:
        return
    if new not in STATUS_TRANSITIONS.get(current, set()):
        raise HTTPException(status_code=400, detail=f"Cannot change quotation status from '{current}' to '{new}'")


async def build_line_items(
    db: AsyncSession,
    entries: List[QuotationItemIn],
    tier: Optional[PricingTier],
    product_ids: Optional[List[int]] = None,
) -> Tuple[List[LineItem], List[BuilderNotice]]:
    """
    Run the requested rows through the builder, applying per-line overrides,
    then append the batch-picked `product_ids` at tier price.
    """
    items: List[LineItem] = []
    notices: List[BuilderNotice] = []

    for entry in entries:
        product = await get_product_or_404(db, entry.product_id)
        result = add_product(items, product, tier)
        if result.notice:
            notices.append(result.notice)
            continue
        items = result.items
        index = len(items) - 1
        try:
            if entry.quantity != 1:
                items = update_quantity(items, index, entry.quantity)
            if entry.custom_price is not None:
                items = update_discount_or_price(items, index, "custom_price", entry.custom_price)
            elif entry.discount is not None:
                items = update_discount_or_price(items, index, "discount", entry.discount)
            if entry.is_detailed:
                items = toggle_detail(items, index)
        except (IndexError, ValueError) as e:
            raise HTTPException(status_code=400, detail=str(e))

    if product_ids:
        products = [await get_product_or_404(db, product_id) for product_id in product_ids]
        result = add_products(items, products, tier)
        items = result.items
        notices.append(result.notice)

    return items, notices


def _item_rows(items: List[LineItem]) -> List[QuotationItem]:
    return [
        QuotationItem(
            position=position,
            product_id=item.product_id,
            product_name=item.name,
            sku=item.sku,
            slug=item.slug,
            category_name=item.category_name,
            sub_category_name=item.sub_category_name,
            brand_name=item.brand_name,
            image_url=item.image_url,
            description=item.description,
            mrp=item.mrp,
            dealer_price=item.dealer_price,
            base_price=item.base_price,
            price_mode=item.price_mode.value,
            discount=item.discount,
            unit_price=item.custom_price,
            quantity=item.quantity,
            gst_rate=item.gst_rate,
            line_total=item.line_total,
            is_detailed=item.is_detailed,
        )
        for position, item in enumerate(items)
    ]


def _apply_totals(quotation: Quotation, totals: DocumentTotals):
    totals = stored_totals(totals)
    quotation.tax_rate = totals.tax_rate
    quotation.subtotal = totals.subtotal
    quotation.tax = totals.tax
    quotation.shipping_cost = totals.shipping_cost
    quotation.total_amount = totals.total


async def _priced_items(
    db: AsyncSession, customer: Customer, entries: List[QuotationItemIn], product_ids: Optional[List[int]] = None
):
    if not entries and not product_ids:
        raise HTTPException(status_code=400, detail="Quotation must contain at least one item")
    items, notices = await build_line_items(db, entries, resolve_tier(customer), product_ids)
    for notice in notices:
        logger.info("Quotation builder notice for customer %s: %s", customer.id, notice.message)
    return items


# --------------------------
# CREATE QUOTATION
# --------------------------
async def create_quotation(db: AsyncSession, data: QuotationCreate, current_user) -> QuotationResponse:
    if data.status not in ("draft", "sent"):
        raise HTTPException(status_code=400, detail="A new quotation must be a draft or sent")

    customer = await _active_customer(db, data.customer_id)
    items = await _priced_items(db, customer, data.items, data.product_ids)

    tax_rate = data.tax_rate if data.tax_rate is not None else DEFAULT_TAX_RATE
    totals = compute_totals(items, tax_rate)
    issue_date = data.issue_date or date.today()

    try:
        quotation_number = await generate_document_number(db, Quotation, QUOTATION_PREFIX)
        quotation = Quotation(
            quotation_number=quotation_number,
            reference_number=data.reference_number,
            status=data.status,
            customer_id=customer.id,
            customer_snapshot=customer_block(customer).model_dump(),
            issue_date=issue_date,
            valid_until=data.valid_until or issue_date + timedelta(days=QUOTATION_VALID_DAYS),
            payment_terms=data.payment_terms or DEFAULT_PAYMENT_TERMS,
            delivery_terms=data.delivery_terms or DEFAULT_DELIVERY_TERMS,
            terms_and_conditions=data.terms_and_conditions,
            notes=data.notes,
            show_total=data.show_total,
            discount_value=data.discount_value or Decimal("0"),
            created_by=current_user.id,
            updated_by=current_user.id,
        )
        _apply_totals(quotation, totals)
        quotation.items = _item_rows(items)

        db.add(quotation)
        await db.flush()

        await log_activity(
            db,
            event_type="quotation_created",
            description=f"Quotation '{quotation_number}' created for '{customer.name}' by {current_user.email}.",
            admin_id=current_user.id,
            customer_id=customer.id,
            quotation_id=quotation.id,
            metadata={"items": len(items), "total": str(quotation.total_amount)},
        )
        await db.commit()
    except HTTPException:
        raise
    except Exception:
        await db.rollback()
        logger.exception("Failed to create quotation for customer %s", data.customer_id)
        raise HTTPException(status_code=500, detail="An unexpected error occurred while creating the quotation.")

    quotation = await _reload(db, quotation.id)
    return QuotationResponse(message="Quotation created successfully", data=QuotationOut.model_validate(quotation))


# --------------------------
# PREVIEW (no persistence)
# --------------------------
async def preview_quotation(db: AsyncSession, data: QuotationPreviewRequest) -> QuotationPreviewResponse:
    tier = None
    if data.customer_id is not None:
        tier = resolve_tier(await _active_customer(db, data.customer_id))

    items, notices = await build_line_items(db, data.items, tier, data.product_ids)
    tax_rate = data.tax_rate if data.tax_rate is not None else DEFAULT_TAX_RATE
    return QuotationPreviewResponse(
        message="Quotation preview generated",
        data=QuotationPreviewOut(items=items, totals=compute_totals(items, tax_rate), notices=notices),
    )


# --------------------------
# GET / LIST
# --------------------------
async def get_quotation(db: AsyncSession, quotation_id: int) -> QuotationResponse:
    quotation = await get_quotation_or_404(db, quotation_id)
    return QuotationResponse(message="Quotation retrieved successfully", data=QuotationOut.model_validate(quotation))


async def list_quotations(
    db: AsyncSession,
    status: Optional[str] = None,
    customer_id: Optional[int] = None,
    search: Optional[str] = None,
    page: int = 1,
    page_size: int = 20,
) -> QuotationListResponse:
    conditions = []
    if status:
        conditions.append(Quotation.status == status)
    if customer_id:
        conditions.append(Quotation.customer_id == customer_id)
    if search:
        conditions.append(Quotation.quotation_number.ilike(f"%{search}%"))

    total = (await db.execute(select(func.count(Quotation.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Quotation)
        .where(*conditions)
        .order_by(Quotation.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return QuotationListResponse(
        message="Quotations retrieved successfully",
        total=total,
        data=[QuotationOut.model_validate(q) for q in result.scalars().all()],
    )


# --------------------------
# UPDATE QUOTATION
# --------------------------
async def update_quotation(db: AsyncSession, quotation_id: int, data: QuotationUpdate, current_user) -> QuotationResponse:
    """
    Either a status/notes change or a full snapshot replacement when `items`
    is sent. No version check: the last save wins.
    """
    quotation = await get_quotation_or_404(db, quotation_id)
    if quotation.status == "cancelled":
        raise HTTPException(status_code=400, detail="Cancelled quotations cannot be edited")

    changes = data.model_dump(exclude_unset=True, exclude={"items", "status", "customer_id", "tax_rate"})
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}

    if data.status is not None:
        check_transition(quotation.status, data.status)

    customer = quotation.customer
    if data.customer_id is not None and data.customer_id != quotation.customer_id:
        customer = await _active_customer(db, data.customer_id)
        quotation.customer_id = customer.id
        quotation.customer_snapshot = customer_block(customer).model_dump()

    for key, value in changes.items():
        setattr(quotation, key, value)

    tax_rate = data.tax_rate if data.tax_rate is not None else quotation.tax_rate
    replaced = data.items is not None
    if replaced:
        items = await _priced_items(db, customer, data.items)
        quotation.items = _item_rows(items)
        _apply_totals(quotation, compute_totals(items, tax_rate))
    elif data.tax_rate is not None:
        # Stored rows expose unit_price, which the totals fall back to
        _apply_totals(quotation, compute_totals(quotation.items, tax_rate))

    previous_status = quotation.status
    if data.status is not None:
        quotation.status = data.status
    quotation.updated_by = current_user.id

    try:
        await log_activity(
            db,
            event_type="quotation_updated",
            description=f"Quotation '{quotation.quotation_number}' updated by {current_user.email}.",
            admin_id=current_user.id,
            customer_id=quotation.customer_id,
            quotation_id=quotation.id,
            metadata={
                "items_replaced": replaced,
                "status": {"from": previous_status, "to": quotation.status},
                "fields": sorted(changes.keys()),
            },
        )
        await db.commit()
    except Exception:
        await db.rollback()
        logger.exception("Failed to update quotation %s", quotation_id)
        raise HTTPException(status_code=500, detail="An unexpected error occurred while updating the quotation.")

    quotation = await _reload(db, quotation.id)
    return QuotationResponse(message="Quotation updated successfully", data=QuotationOut.model_validate(quotation))


async def update_quotation_status(db: AsyncSession, quotation_id: int, status: str, current_user) -> QuotationResponse:
    quotation = await get_quotation_or_404(db, quotation_id)
    if quotation.status == status:
        raise HTTPException(status_code=400, detail=f"Quotation is already {status}")
    check_transition(quotation.status, status)

    previous = quotation.status
    quotation.status = status
    quotation.updated_by = current_user.id
    await log_activity(
        db,
        event_type=f"quotation_{status}",
        description=f"Quotation '{quotation.quotation_number}' moved from {previous} to {status} by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=quotation.customer_id,
        quotation_id=quotation.id,
        metadata={"from": previous, "to": status},
    )
    await db.commit()

    quotation = await _reload(db, quotation.id)
    return QuotationResponse(message=f"Quotation marked as {status}", data=QuotationOut.model_validate(quotation))


# --------------------------
# DELETE QUOTATION
# --------------------------
async def delete_quotation(db: AsyncSession, quotation_id: int, current_user) -> QuotationResponse:
    quotation = await get_quotation_or_404(db, quotation_id)
    number = quotation.quotation_number

    await db.delete(quotation)
    await log_activity(
        db,
        event_type="quotation_deleted",
        description=f"Quotation '{number}' deleted by {current_user.email}.",
        admin_id=current_user.id,
        customer_id=quotation.customer_id,
        metadata={"quotation_number": number},
    )
    await db.commit()
    return QuotationResponse(message="Quotation deleted successfully", data=None)


# --------------------------
# PDF EXPORT
# --------------------------
async def export_quotation_pdf(db: AsyncSession, quotation_id: int) -> Tuple[str, bytes]:
    quotation = await get_quotation_or_404(db, quotation_id)
    document = build_document_from_quotation(quotation)
    pdf_bytes = render_quotation_pdf(document, logo_path=COMPANY_LOGO_PATH)
    return f"{quotation.quotation_number}.pdf", pdf_bytes
