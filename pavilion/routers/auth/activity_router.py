# pavilion/routers/auth/activity_router.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
from pavilion.core.config import ADMIN_ROLES
from pavilion.core.db import get_db
from pavilion.services.auth_services.activity_service import get_activities
from pavilion.schemas.activity_schemas import ActivityLogOut, ActivityLogListResponse
from pavilion.utils.get_user import get_current_user
from pavilion.utils.check_roles import require_role

router = APIRouter(prefix="/activities", tags=["Activity Log"])


@router.get("/", response_model=ActivityLogListResponse)
@require_role(ADMIN_ROLES)
async def list_activities(
    db: AsyncSession = Depends(get_db),
    _user=Depends(get_current_user),
    event_type: Optional[str] = Query(None),
    admin_id: Optional[int] = Query(None),
    customer_id: Optional[int] = Query(None),
    quotation_id: Optional[int] = Query(None),
    order_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    sort_by: str = Query("created_at"),
    order: str = Query("desc")
):
    """
    Fetch the activity timeline with pagination, filtering, and sorting.
    """
    total, activities = await get_activities(
        db=db,
        event_type=event_type,
        admin_id=admin_id,
        customer_id=customer_id,
        quotation_id=quotation_id,
        order_id=order_id,
        page=page,
        page_size=page_size,
        sort_by=sort_by,
        order=order
    )

    return ActivityLogListResponse(
        message="Activities fetched successfully",
        total=total,
        data=[ActivityLogOut.model_validate(a) for a in activities]
    )
