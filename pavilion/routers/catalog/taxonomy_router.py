# pavilion/routers/catalog/taxonomy_router.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.catalog_schemas import (
    CategoryCreate, CategoryUpdate, CategoryOut,
    SubCategoryCreate, SubCategoryUpdate, SubCategoryOut,
    BrandCreate, BrandUpdate, BrandOut,
    TagCreate, TagUpdate, TagOut,
)
from pavilion.schemas.user_schemas import MessageResponse
from pavilion.services.catalog_services import taxonomy_service
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(tags=["Taxonomy"])


@router.get("/categories", response_model=List[CategoryOut])
@require_role(ADMIN_ROLES)
async def list_categories(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    include_inactive: bool = Query(False),
):
    return await taxonomy_service.list_categories(db, active_only=not include_inactive)


@router.post("/categories", response_model=CategoryOut, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_category(data: CategoryCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.create_category(db, data)


@router.put("/categories/{category_id}", response_model=CategoryOut)
@require_role(ADMIN_ROLES)
async def update_category(
    category_id: int, data: CategoryUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await taxonomy_service.update_category(db, category_id, data)


@router.delete("/categories/{category_id}", response_model=MessageResponse)
@require_role(ADMIN_ROLES)
async def delete_category(category_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.delete_category(db, category_id, _user)


@router.get("/sub-categories", response_model=List[SubCategoryOut])
@require_role(ADMIN_ROLES)
async def list_sub_categories(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    category_id: Optional[int] = Query(None),
):
    return await taxonomy_service.list_sub_categories(db, category_id)


@router.post("/sub-categories", response_model=SubCategoryOut, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_sub_category(data: SubCategoryCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.create_sub_category(db, data)


@router.put("/sub-categories/{sub_category_id}", response_model=SubCategoryOut)
@require_role(ADMIN_ROLES)
async def update_sub_category(
    sub_category_id: int, data: SubCategoryUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await taxonomy_service.update_sub_category(db, sub_category_id, data)


@router.delete("/sub-categories/{sub_category_id}", response_model=MessageResponse)
@require_role(ADMIN_ROLES)
async def delete_sub_category(
    sub_category_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await taxonomy_service.delete_sub_category(db, sub_category_id, _user)


@router.get("/brands", response_model=List[BrandOut])
@require_role(ADMIN_ROLES)
async def list_brands(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.list_brands(db)


@router.post("/brands", response_model=BrandOut, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_brand(data: BrandCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.create_brand(db, data)


@router.put("/brands/{brand_id}", response_model=BrandOut)
@require_role(ADMIN_ROLES)
async def update_brand(brand_id: int, data: BrandUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.update_brand(db, brand_id, data)


@router.delete("/brands/{brand_id}", response_model=MessageResponse)
@require_role(ADMIN_ROLES)
async def delete_brand(brand_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.delete_brand(db, brand_id, _user)


@router.get("/tags", response_model=List[TagOut])
@require_role(ADMIN_ROLES)
async def list_tags(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.list_tags(db)


@router.post("/tags", response_model=TagOut, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_tag(data: TagCreate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.create_tag(db, data)


@router.put("/tags/{tag_id}", response_model=TagOut)
@require_role(ADMIN_ROLES)
async def update_tag(tag_id: int, data: TagUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.update_tag(db, tag_id, data)


@router.delete("/tags/{tag_id}", response_model=MessageResponse)
@require_role(ADMIN_ROLES)
async def delete_tag(tag_id: int, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await taxonomy_service.delete_tag(db, tag_id, _user)
