# pavilion/services/catalog_services/product_service.py
from decimal import Decimal
import logging
from typing import Optional, List

from fastapi import HTTPException
from sqlalchemy import func, or_, asc, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pavilion.models.catalog_models import Product, Category, SubCategory, Brand, Tag
from pavilion.schemas.catalog_schemas import (
    ProductCreate,
    ProductUpdate,
    ProductOut,
    ProductResponse,
    ProductListResponse,
    ProductBulkRow,
    ProductBulkResult,
    ProductBulkResponse,
)
from pavilion.utils.activity_helpers import log_activity
from pavilion.utils.text_helpers import slugify

logger = logging.getLogger(__name__)

SORT_FIELDS = {
    "name": Product.name,
    "created_at": Product.created_at,
    "mrp_price": Product.mrp_price,
    "sku": Product.sku,
}

# Columns a partial update may not clear
REQUIRED_FIELDS = {"sku", "name", "slug", "gst_rate", "stock", "is_active", "is_quote_hidden"}


# --------------------------
# Helpers
# --------------------------
async def _validate_refs(db: AsyncSession, category_id, sub_category_id, brand_id):
    if category_id is not None and not await db.get(Category, category_id):
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")
    if sub_category_id is not None:
        sub_category = await db.get(SubCategory, sub_category_id)
        if not sub_category:
            raise HTTPException(status_code=404, detail=f"Sub-category {sub_category_id} not found")
        if category_id is not None and sub_category.category_id != category_id:
            raise HTTPException(status_code=400, detail="Sub-category does not belong to the selected category")
    if brand_id is not None and not await db.get(Brand, brand_id):
        raise HTTPException(status_code=404, detail=f"Brand {brand_id} not found")


async def _load_tags(db: AsyncSession, tag_ids: List[int]) -> List[Tag]:
    if not tag_ids:
        return []
    result = await db.execute(select(Tag).where(Tag.id.in_(tag_ids)))
    tags = result.scalars().all()
    missing = set(tag_ids) - {t.id for t in tags}
    if missing:
        raise HTTPException(status_code=404, detail=f"Tags not found: {sorted(missing)}")
    return list(tags)


async def _reload(db: AsyncSession, product_id: int) -> Product:
    result = await db.execute(
        select(Product).where(Product.id == product_id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


def product_filters(
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    sub_category_id: Optional[int] = None,
    brand_id: Optional[int] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    include_inactive: bool = False,
    include_quote_hidden: bool = True,
) -> list:
    conditions = []
    if not include_inactive:
        conditions.append(Product.is_active == True)  # noqa: E712
    if not include_quote_hidden:
        conditions.append(Product.is_quote_hidden == False)  # noqa: E712
    if search:
        like = f"%{search}%"
        conditions.append(or_(Product.name.ilike(like), Product.sku.ilike(like)))
    if category_id:
        conditions.append(Product.category_id == category_id)
    if sub_category_id:
        conditions.append(Product.sub_category_id == sub_category_id)
    if brand_id:
        conditions.append(Product.brand_id == brand_id)
    if min_price is not None:
        conditions.append(Product.mrp_price >= min_price)
    if max_price is not None:
        conditions.append(Product.mrp_price <= max_price)
    return conditions


async def query_products(
    db: AsyncSession,
    conditions: list,
    page: int = 1,
    limit: int = 20,
    sort_by: str = "created_at",
    order: str = "desc",
):
    sort_col = SORT_FIELDS.get(sort_by, Product.created_at)
    sort_order = asc(sort_col) if order.lower() == "asc" else desc(sort_col)

    total = (await db.execute(select(func.count(Product.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Product)
        .where(*conditions)
        .order_by(sort_order, Product.id)
        .offset((page - 1) * limit)
        .limit(limit)
    )
    return total, result.scalars().all()


# --------------------------
# LIST / GET
# --------------------------
async def list_products(
    db: AsyncSession,
    page: int = 1,
    limit: int = 20,
    search: Optional[str] = None,
    category_id: Optional[int] = None,
    sub_category_id: Optional[int] = None,
    brand_id: Optional[int] = None,
    min_price: Optional[Decimal] = None,
    max_price: Optional[Decimal] = None,
    include_inactive: bool = False,
    include_quote_hidden: bool = True,
    sort_by: str = "created_at",
    order: str = "desc",
) -> ProductListResponse:
    conditions = product_filters(
        search, category_id, sub_category_id, brand_id, min_price, max_price,
        include_inactive=include_inactive, include_quote_hidden=include_quote_hidden,
    )
    total, products = await query_products(db, conditions, page, limit, sort_by, order)
    return ProductListResponse(
        message="Products retrieved successfully",
        total=total,
        page=page,
        limit=limit,
        data=[ProductOut.model_validate(p) for p in products],
    )


async def get_product_or_404(db: AsyncSession, product_id: int, active_only: bool = True) -> Product:
    product = await db.get(Product, product_id)
    if not product or (active_only and not product.is_active):
        raise HTTPException(status_code=404, detail=f"Product {product_id} not found")
    return product


async def get_product(db: AsyncSession, product_id: int) -> ProductResponse:
    product = await get_product_or_404(db, product_id, active_only=False)
    return ProductResponse(message="Product retrieved successfully", data=ProductOut.model_validate(product))


async def get_product_by_slug(db: AsyncSession, slug: str) -> Product:
    result = await db.execute(select(Product).where(Product.slug == slug, Product.is_active == True))  # noqa: E712
    product = result.scalars().first()
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


# --------------------------
# CREATE
# --------------------------
async def create_product(db: AsyncSession, data: ProductCreate, current_user) -> ProductResponse:
    await _validate_refs(db, data.category_id, data.sub_category_id, data.brand_id)
    tags = await _load_tags(db, data.tag_ids)

    payload = data.model_dump(exclude={"tag_ids"})
    payload["slug"] = data.slug or slugify(f"{data.name}-{data.sku}")
    product = Product(**payload, created_by=current_user.id, updated_by=current_user.id)
    product.tags = tags

    try:
        db.add(product)
        await db.flush()
        await log_activity(
            db,
            event_type="product_created",
            description=f"Product '{product.name}' (SKU {product.sku}) created by {current_user.email}.",
            admin_id=current_user.id,
            metadata={"product_id": product.id},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="A product with this SKU or slug already exists.")

    product = await _reload(db, product.id)
    return ProductResponse(message="Product created successfully", data=ProductOut.model_validate(product))


# --------------------------
# UPDATE
# --------------------------
async def update_product(db: AsyncSession, product_id: int, data: ProductUpdate, current_user) -> ProductResponse:
    product = await get_product_or_404(db, product_id, active_only=False)
    changes = data.model_dump(exclude_unset=True)
    changes = {k: v for k, v in changes.items() if v is not None or k not in REQUIRED_FIELDS}

    tag_ids = changes.pop("tag_ids", None)
    await _validate_refs(
        db,
        changes.get("category_id", product.category_id),
        changes.get("sub_category_id", product.sub_category_id),
        changes.get("brand_id", product.brand_id),
    )
    if tag_ids is not None:
        product.tags = await _load_tags(db, tag_ids)

    for key, value in changes.items():
        setattr(product, key, value)
    product.updated_by = current_user.id

    try:
        await log_activity(
            db,
            event_type="product_updated",
            description=f"Product '{product.name}' updated by {current_user.email}.",
            admin_id=current_user.id,
            metadata={"product_id": product.id, "fields": sorted(changes.keys())},
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="A product with this SKU or slug already exists.")

    product = await _reload(db, product.id)
    return ProductResponse(message="Product updated successfully", data=ProductOut.model_validate(product))


# --------------------------
# SOFT DELETE
# --------------------------
async def delete_product(db: AsyncSession, product_id: int, current_user) -> ProductResponse:
    product = await get_product_or_404(db, product_id)
    product.is_active = False
    product.updated_by = current_user.id

    await log_activity(
        db,
        event_type="product_deleted",
        description=f"Product '{product.name}' (SKU {product.sku}) deactivated by {current_user.email}.",
        admin_id=current_user.id,
        metadata={"product_id": product.id},
    )
    await db.commit()
    return ProductResponse(message="Product deleted successfully", data=None)


# --------------------------
# BULK UPLOAD
# --------------------------
def _key(name: str) -> str:
    return name.strip().lower()


async def bulk_upload_products(db: AsyncSession, rows: List[ProductBulkRow], current_user) -> ProductBulkResponse:
    """
    Create or update products from spreadsheet rows, matched on SKU.

    Category, sub-category and brand are resolved by name (case-insensitive).
    A bad row is reported in `errors` and skipped; the other rows still apply.
    """
    categories = {_key(c.name): c.id for c in (await db.execute(select(Category))).scalars().all()}
    brands = {_key(b.name): b.id for b in (await db.execute(select(Brand))).scalars().all()}
    sub_categories = {
        (s.category_id, _key(s.name)): s.id for s in (await db.execute(select(SubCategory))).scalars().all()
    }

    skus = [row.sku.strip() for row in rows if row.sku and row.sku.strip()]
    existing = (await db.execute(select(Product).where(Product.sku.in_(skus)))).scalars().all() if skus else []
    by_sku = {p.sku: p for p in existing}
    taken_slugs = set((await db.execute(select(Product.slug))).scalars().all())

    result = ProductBulkResult()
    for number, row in enumerate(rows, start=1):
        sku = (row.sku or "").strip()
        name = (row.name or "").strip()
        if not sku or not name or row.mrp_price is None:
            result.errors.append(f"Row {number}: name, SKU and MRP price are required")
            continue
        if any(v is not None and v < 0 for v in (row.mrp_price, row.dealer_price, row.shop_price, row.gst_rate, row.stock)):
            result.errors.append(f"Row {number}: prices, GST rate and stock cannot be negative")
            continue

        category_id = categories.get(_key(row.category)) if row.category else None
        if row.category and category_id is None:
            result.errors.append(f"Row {number}: category '{row.category}' not found")
            continue
        brand_id = brands.get(_key(row.brand)) if row.brand else None
        if row.brand and brand_id is None:
            result.errors.append(f"Row {number}: brand '{row.brand}' not found")
            continue
        sub_category_id = None
        if row.sub_category:
            sub_category_id = sub_categories.get((category_id, _key(row.sub_category)))
            if sub_category_id is None:
                result.errors.append(
                    f"Row {number}: sub-category '{row.sub_category}' not found in category '{row.category or ''}'"
                )
                continue

        fields = {
            "name": name,
            "mrp_price": row.mrp_price,
            "dealer_price": row.dealer_price,
            "shop_price": row.shop_price,
            "gst_rate": row.gst_rate,
            "stock": row.stock,
            "description": row.description,
            "category_id": category_id,
            "sub_category_id": sub_category_id,
            "brand_id": brand_id,
            "is_active": row.is_active,
        }
        fields = {k: v for k, v in fields.items() if v is not None}

        product = by_sku.get(sku)
        if product is not None:
            for key, value in fields.items():
                setattr(product, key, value)
            product.updated_by = current_user.id
            result.updated += 1
            continue

        slug = slugify(f"{name}-{sku}")
        if slug in taken_slugs:
            result.errors.append(f"Row {number}: slug '{slug}' is already used by another product")
            continue
        product = Product(sku=sku, slug=slug, created_by=current_user.id, updated_by=current_user.id, **fields)
        db.add(product)
        by_sku[sku] = product
        taken_slugs.add(slug)
        result.created += 1

    try:
        await log_activity(
            db,
            event_type="products_bulk_uploaded",
            description=(
                f"Bulk upload by {current_user.email}: {result.created} created, "
                f"{result.updated} updated, {len(result.errors)} rejected."
            ),
            admin_id=current_user.id,
            metadata=result.model_dump(),
        )
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.exception("Bulk product upload failed")
        raise HTTPException(status_code=400, detail="Bulk upload conflicts with existing products; nothing was saved.")

    logger.info("Bulk upload: %s created, %s updated, %s errors", result.created, result.updated, len(result.errors))
    return ProductBulkResponse(message="Bulk upload processed", data=result)
