# pavilion/schemas/activity_schemas.py
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List


class ActivityLogOut(BaseModel):
    id: int
    admin_id: Optional[int]
    customer_id: Optional[int]
    quotation_id: Optional[int]
    order_id: Optional[int]
    event_type: str
    description: str
    metadata: Optional[dict] = Field(None, validation_alias="details")
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ActivityLogListResponse(BaseModel):
    message: str
    total: int
    data: List[ActivityLogOut]
