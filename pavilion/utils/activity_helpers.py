# pavilion/utils/activity_helpers.py
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from pavilion.models.activity_models import ActivityLog

logger = logging.getLogger(__name__)


async def log_activity(
    db: AsyncSession,
    event_type: str,
    description: str,
    admin_id: Optional[int] = None,
    customer_id: Optional[int] = None,
    quotation_id: Optional[int] = None,
    order_id: Optional[int] = None,
    metadata: Optional[dict] = None,
    commit: bool = False,
):
    """
    Adds an activity log entry to the session. The caller is responsible for the commit.
    """
    activity = ActivityLog(
        admin_id=admin_id,
        customer_id=customer_id,
        quotation_id=quotation_id,
        order_id=order_id,
        event_type=event_type,
        description=description,
        details=metadata or {},
    )
    db.add(activity)
    logger.debug("activity %s: %s", event_type, description)
    if commit:
        await db.commit()
    return activity
