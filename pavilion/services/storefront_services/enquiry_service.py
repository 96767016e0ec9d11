import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func
from fastapi import HTTPException

from pavilion.models.enquiry_models import Enquiry
from pavilion.schemas.storefront_schemas import EnquiryCreate, EnquiryOut, EnquiryResponse, EnquiryListResponse
from pavilion.services.catalog_services.product_service import get_product_or_404
from pavilion.utils.activity_helpers import log_activity

logger = logging.getLogger(__name__)

ENQUIRY_STATUSES = ("new", "contacted", "closed")


async def create_enquiry(db: AsyncSession, data: EnquiryCreate) -> EnquiryResponse:
    product_name = None
    if data.product_id is not None:
        product = await get_product_or_404(db, data.product_id)
        product_name = product.name

    enquiry = Enquiry(**data.model_dump(), status="new")
    db.add(enquiry)
    await db.flush()

    await log_activity(
        db,
        event_type="enquiry_received",
        description=f"Enquiry from {data.name} ({data.email})" + (f" about '{product_name}'" if product_name else "") + ".",
        metadata={"enquiry_id": enquiry.id, "product_id": data.product_id},
    )
    await db.commit()
    await db.refresh(enquiry)
    logger.info("Enquiry %s received", enquiry.id)
    return EnquiryResponse(message="Enquiry submitted successfully", data=EnquiryOut.model_validate(enquiry))


async def list_enquiries(
    db: AsyncSession, status: Optional[str] = None, page: int = 1, page_size: int = 20
) -> EnquiryListResponse:
    conditions = [Enquiry.status == status] if status else []
    total = (await db.execute(select(func.count(Enquiry.id)).where(*conditions))).scalar() or 0
    result = await db.execute(
        select(Enquiry)
        .where(*conditions)
        .order_by(Enquiry.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    )
    return EnquiryListResponse(
        message="Enquiries retrieved successfully",
        total=total,
        data=[EnquiryOut.model_validate(e) for e in result.scalars().all()],
    )


async def update_enquiry_status(db: AsyncSession, enquiry_id: int, status: str, current_user) -> EnquiryResponse:
    if status not in ENQUIRY_STATUSES:
        raise HTTPException(status_code=400, detail=f"Status must be one of {ENQUIRY_STATUSES}")
    enquiry = await db.get(Enquiry, enquiry_id)
    if not enquiry:
        raise HTTPException(status_code=404, detail="Enquiry not found")

    enquiry.status = status
    await log_activity(
        db,
        event_type="enquiry_updated",
        description=f"Enquiry {enquiry.id} marked {status} by {current_user.email}.",
        admin_id=current_user.id,
        metadata={"enquiry_id": enquiry.id},
    )
    await db.commit()
    return EnquiryResponse(message="Enquiry updated successfully", data=EnquiryOut.model_validate(enquiry))
