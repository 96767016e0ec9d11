# pavilion/routers/sales/quotations_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.quotation_schemas import (
    QuotationCreate,
    QuotationUpdate,
    QuotationStatusUpdate,
    QuotationPreviewRequest,
    QuotationResponse,
    QuotationListResponse,
    QuotationPreviewResponse,
)
from pavilion.services.sales_services.quotation_service import (
    create_quotation,
    preview_quotation,
    get_quotation,
    list_quotations,
    update_quotation,
    update_quotation_status,
    delete_quotation,
    export_quotation_pdf,
)
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/quotations", tags=["Quotations"])


# --------------------------
# CREATE QUOTATION
# --------------------------
@router.post("/", response_model=QuotationResponse, status_code=status.HTTP_201_CREATED)
@require_role(ADMIN_ROLES)
async def create_quotation_route(
    data: QuotationCreate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await create_quotation(db, data, _user)


@router.post("/preview", response_model=QuotationPreviewResponse)
@require_role(ADMIN_ROLES)
async def preview_quotation_route(
    data: QuotationPreviewRequest,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await preview_quotation(db, data)


# --------------------------
# LIST QUOTATIONS
# --------------------------
@router.get("/", response_model=QuotationListResponse)
@require_role(ADMIN_ROLES)
async def list_quotations_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    status: Optional[str] = Query(None, description="draft | sent | cancelled"),
    customer_id: Optional[int] = Query(None),
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await list_quotations(db, status, customer_id, search, page, page_size)


# --------------------------
# GET QUOTATION
# --------------------------
@router.get("/{quotation_id}", response_model=QuotationResponse)
@require_role(ADMIN_ROLES)
async def get_quotation_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await get_quotation(db, quotation_id)


@router.get("/{quotation_id}/pdf")
@require_role(ADMIN_ROLES)
async def export_quotation_pdf_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    filename, pdf_bytes = await export_quotation_pdf(db, quotation_id)
    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# --------------------------
# UPDATE QUOTATION
# --------------------------
@router.put("/{quotation_id}", response_model=QuotationResponse)
@require_role(ADMIN_ROLES)
async def update_quotation_route(
    quotation_id: int,
    data: QuotationUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await update_quotation(db, quotation_id, data, _user)


@router.patch("/{quotation_id}/status", response_model=QuotationResponse)
@require_role(ADMIN_ROLES)
async def update_quotation_status_route(
    quotation_id: int,
    data: QuotationStatusUpdate,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await update_quotation_status(db, quotation_id, data.status, _user)


# --------------------------
# DELETE QUOTATION
# --------------------------
@router.delete("/{quotation_id}", response_model=QuotationResponse)
@require_role(ADMIN_ROLES)
async def delete_quotation_route(
    quotation_id: int,
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user)
):
    return await delete_quotation(db, quotation_id, _user)
