# pavilion/routers/storefront/enquiries_router.py
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from pavilion.core.db import get_db
from pavilion.schemas.storefront_schemas import EnquiryCreate, EnquiryResponse
from pavilion.services.storefront_services.enquiry_service import create_enquiry

router = APIRouter(prefix="/enquiries", tags=["Storefront"])


@router.post("/", response_model=EnquiryResponse, status_code=status.HTTP_201_CREATED)
async def submit_enquiry(data: EnquiryCreate, db: AsyncSession = Depends(get_db)):
    return await create_enquiry(db, data)
