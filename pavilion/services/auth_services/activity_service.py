from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import desc, asc, func
from fastapi import HTTPException
from pavilion.models.activity_models import ActivityLog
from typing import List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

ALLOWED_SORT_FIELDS = {"id", "event_type", "created_at"}


async def get_activities(
    db: AsyncSession,
    event_type: Optional[str] = None,
    admin_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    quotation_id: Optional[int] = None,
    order_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 20,
    sort_by: str = "created_at",
    order: str = "desc"
) -> Tuple[int, List[ActivityLog]]:
    """
    Fetch the activity timeline with optional filters and sorting.
    Returns total count and list of activities.
    """
    try:
        if sort_by not in ALLOWED_SORT_FIELDS:
            sort_by = "created_at"
        sort_col = getattr(ActivityLog, sort_by)
        sort_order = desc(sort_col) if order.lower() == "desc" else asc(sort_col)

        conditions = []
        if event_type:
            conditions.append(ActivityLog.event_type == event_type)
        if admin_id:
            conditions.append(ActivityLog.admin_id == admin_id)
        if customer_id:
            conditions.append(ActivityLog.customer_id == customer_id)
        if quotation_id:
            conditions.append(ActivityLog.quotation_id == quotation_id)
        if order_id:
            conditions.append(ActivityLog.order_id == order_id)

        count_stmt = select(func.count(ActivityLog.id)).where(*conditions)
        total = (await db.execute(count_stmt)).scalar() or 0

        stmt = (
            select(ActivityLog)
            .where(*conditions)
            .order_by(sort_order, desc(ActivityLog.id))
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(stmt)
        return total, result.scalars().all()

    except Exception as e:
        logger.exception("Failed to fetch activities")
        raise HTTPException(status_code=500, detail=f"Failed to fetch activities: {str(e)}")
