from datetime import datetime, timezone

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select


async def generate_document_number(db: AsyncSession, model, prefix: str) -> str:
    """PREFIX-YYYYMMDD-NNNN, sequence taken from the next primary key."""
    today_str = datetime.now(timezone.utc).strftime("%Y%m%d")
    result = await db.execute(select(func.max(model.id)))
    last_id = result.scalar() or 0
    return f"{prefix}-{today_str}-{last_id + 1:04d}"
