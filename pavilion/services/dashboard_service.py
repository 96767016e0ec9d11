from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import func

from pavilion.models.catalog_models import Product
from pavilion.models.customer_models import Customer
from pavilion.models.quotation_models import Quotation
from pavilion.models.order_models import Order
from pavilion.models.enquiry_models import Enquiry
from pavilion.schemas.storefront_schemas import DashboardStats, DashboardResponse


async def _count(db: AsyncSession, column, *conditions) -> int:
    return (await db.execute(select(func.count(column)).where(*conditions))).scalar() or 0


async def get_dashboard_stats(db: AsyncSession) -> DashboardResponse:
    rows = await db.execute(select(Order.status, func.count(Order.id)).group_by(Order.status))
    orders_by_status = {status: count for status, count in rows.all()}

    stats = DashboardStats(
        products=await _count(db, Product.id, Product.is_active == True),  # noqa: E712
        customers=await _count(db, Customer.id, Customer.is_active == True, Customer.status == "approved"),  # noqa: E712
        pending_b2b_requests=await _count(db, Customer.id, Customer.status == "pending"),
        quotations=await _count(db, Quotation.id),
        orders=sum(orders_by_status.values()),
        orders_by_status=orders_by_status,
        open_enquiries=await _count(db, Enquiry.id, Enquiry.status == "new"),
    )
    return DashboardResponse(message="Dashboard stats retrieved successfully", data=stats)
