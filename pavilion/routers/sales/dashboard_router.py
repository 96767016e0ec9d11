# pavilion/routers/sales/dashboard_router.py
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.schemas.storefront_schemas import DashboardResponse, EnquiryResponse, EnquiryListResponse, EnquiryStatusUpdate
from pavilion.services.dashboard_service import get_dashboard_stats
from pavilion.services.storefront_services.enquiry_service import list_enquiries, update_enquiry_status
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(tags=["Dashboard"])


@router.get("/dashboard", response_model=DashboardResponse)
@require_role(ADMIN_ROLES)
async def dashboard(db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)):
    return await get_dashboard_stats(db)


@router.get("/enquiries", response_model=EnquiryListResponse)
@require_role(ADMIN_ROLES)
async def list_enquiries_route(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    status: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
):
    return await list_enquiries(db, status, page, page_size)


@router.patch("/enquiries/{enquiry_id}/status", response_model=EnquiryResponse)
@require_role(ADMIN_ROLES)
async def update_enquiry_status_route(
    enquiry_id: int, data: EnquiryStatusUpdate, db: AsyncSession = Depends(get_db), _user=Depends(get_current_user)
):
    return await update_enquiry_status(db, enquiry_id, data.status, _user)
