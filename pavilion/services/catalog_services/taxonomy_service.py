# pavilion/services/catalog_services/taxonomy_service.py
import logging
from typing import Optional, List

from fastapi import HTTPException
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from pavilion.models.catalog_models import Category, SubCategory, Brand, Tag, Product, product_tags
from pavilion.schemas.catalog_schemas import (
    CategoryCreate, CategoryUpdate,
    SubCategoryCreate, SubCategoryUpdate,
    BrandCreate, BrandUpdate,
    TagCreate, TagUpdate,
)
from pavilion.schemas.user_schemas import MessageResponse
from pavilion.utils.activity_helpers import log_activity
from pavilion.utils.text_helpers import slugify

logger = logging.getLogger(__name__)


# --------------------------
# Helpers
# --------------------------
async def _save(db: AsyncSession, obj, label: str):
    try:
        db.add(obj)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail=f"{label} with this name or slug already exists.")
    result = await db.execute(
        select(type(obj)).where(type(obj).id == obj.id).execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def _get_or_404(db: AsyncSession, model, obj_id: int, label: str):
    obj = await db.get(model, obj_id)
    if not obj:
        raise HTTPException(status_code=404, detail=f"{label} not found")
    return obj


def _apply(obj, data):
    """Partial update; a new name re-derives the slug unless one is sent."""
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if "name" in changes and "slug" not in changes:
        changes["slug"] = slugify(changes["name"])
    for key, value in changes.items():
        setattr(obj, key, value)
    return changes


async def _product_count(db: AsyncSession, *conditions) -> int:
    return (await db.execute(select(func.count(Product.id)).where(or_(*conditions)))).scalar() or 0


async def _delete(db: AsyncSession, obj, label: str, in_use: int, current_user) -> MessageResponse:
    if in_use:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete {label.lower()} '{obj.name}': used by {in_use} product(s).",
        )
    name = obj.name
    await db.delete(obj)
    await log_activity(
        db,
        event_type=f"{label.lower().replace('-', '_')}_deleted",
        description=f"{label} '{name}' deleted by {current_user.email}.",
        admin_id=current_user.id,
        metadata={"name": name},
    )
    await db.commit()
    logger.info("%s '%s' deleted by %s", label, name, current_user.email)
    return MessageResponse(message=f"{label} deleted successfully")


# --------------------------
# CATEGORIES
# --------------------------
async def list_categories(db: AsyncSession, active_only: bool = True) -> List[Category]:
    stmt = select(Category).order_by(Category.name)
    if active_only:
        stmt = stmt.where(Category.is_active == True)  # noqa: E712
    return (await db.execute(stmt)).scalars().all()


async def create_category(db: AsyncSession, data: CategoryCreate) -> Category:
    category = Category(
        name=data.name,
        slug=data.slug or slugify(data.name),
        description=data.description,
        image_url=data.image_url,
    )
    return await _save(db, category, "Category")


async def get_category_by_slug(db: AsyncSession, slug: str) -> Category:
    result = await db.execute(select(Category).where(Category.slug == slug, Category.is_active == True))  # noqa: E712
    category = result.scalars().first()
    if not category:
        raise HTTPException(status_code=404, detail="Category not found")
    return category


async def update_category(db: AsyncSession, category_id: int, data: CategoryUpdate) -> Category:
    category = await _get_or_404(db, Category, category_id, "Category")
    _apply(category, data)
    return await _save(db, category, "Category")


async def delete_category(db: AsyncSession, category_id: int, current_user) -> MessageResponse:
    """Sub-categories go with the category; products must be moved first."""
    category = await _get_or_404(db, Category, category_id, "Category")
    sub_ids = [s.id for s in category.sub_categories]
    conditions = [Product.category_id == category.id]
    if sub_ids:
        conditions.append(Product.sub_category_id.in_(sub_ids))
    return await _delete(db, category, "Category", await _product_count(db, *conditions), current_user)


# --------------------------
# SUB-CATEGORIES
# --------------------------
async def list_sub_categories(db: AsyncSession, category_id: Optional[int] = None) -> List[SubCategory]:
    stmt = select(SubCategory).order_by(SubCategory.name)
    if category_id:
        stmt = stmt.where(SubCategory.category_id == category_id)
    return (await db.execute(stmt)).scalars().all()


async def create_sub_category(db: AsyncSession, data: SubCategoryCreate) -> SubCategory:
    if not await db.get(Category, data.category_id):
        raise HTTPException(status_code=404, detail=f"Category {data.category_id} not found")
    sub_category = SubCategory(
        category_id=data.category_id,
        name=data.name,
        slug=data.slug or slugify(data.name),
    )
    return await _save(db, sub_category, "Sub-category")


async def update_sub_category(db: AsyncSession, sub_category_id: int, data: SubCategoryUpdate) -> SubCategory:
    sub_category = await _get_or_404(db, SubCategory, sub_category_id, "Sub-category")
    if data.category_id is not None and data.category_id != sub_category.category_id:
        if not await db.get(Category, data.category_id):
            raise HTTPException(status_code=404, detail=f"Category {data.category_id} not found")
        if await _product_count(db, Product.sub_category_id == sub_category.id):
            raise HTTPException(status_code=400, detail="Sub-category has products; it cannot move to another category")
    _apply(sub_category, data)
    return await _save(db, sub_category, "Sub-category")


async def delete_sub_category(db: AsyncSession, sub_category_id: int, current_user) -> MessageResponse:
    sub_category = await _get_or_404(db, SubCategory, sub_category_id, "Sub-category")
    in_use = await _product_count(db, Product.sub_category_id == sub_category.id)
    return await _delete(db, sub_category, "Sub-category", in_use, current_user)


# --------------------------
# BRANDS
# --------------------------
async def list_brands(db: AsyncSession) -> List[Brand]:
    return (await db.execute(select(Brand).order_by(Brand.name))).scalars().all()


async def create_brand(db: AsyncSession, data: BrandCreate) -> Brand:
    brand = Brand(name=data.name, slug=data.slug or slugify(data.name), logo_url=data.logo_url)
    return await _save(db, brand, "Brand")


async def update_brand(db: AsyncSession, brand_id: int, data: BrandUpdate) -> Brand:
    brand = await _get_or_404(db, Brand, brand_id, "Brand")
    _apply(brand, data)
    return await _save(db, brand, "Brand")


async def delete_brand(db: AsyncSession, brand_id: int, current_user) -> MessageResponse:
    brand = await _get_or_404(db, Brand, brand_id, "Brand")
    return await _delete(db, brand, "Brand", await _product_count(db, Product.brand_id == brand.id), current_user)


# --------------------------
# TAGS
# --------------------------
async def list_tags(db: AsyncSession) -> List[Tag]:
    return (await db.execute(select(Tag).order_by(Tag.name))).scalars().all()


async def create_tag(db: AsyncSession, data: TagCreate) -> Tag:
    tag = Tag(name=data.name, slug=data.slug or slugify(data.name))
    return await _save(db, tag, "Tag")


async def update_tag(db: AsyncSession, tag_id: int, data: TagUpdate) -> Tag:
    tag = await _get_or_404(db, Tag, tag_id, "Tag")
    _apply(tag, data)
    return await _save(db, tag, "Tag")


async def delete_tag(db: AsyncSession, tag_id: int, current_user) -> MessageResponse:
    tag = await _get_or_404(db, Tag, tag_id, "Tag")
    in_use = (
        await db.execute(select(func.count()).select_from(product_tags).where(product_tags.c.tag_id == tag.id))
    ).scalar() or 0
    return await _delete(db, tag, "Tag", in_use, current_user)
