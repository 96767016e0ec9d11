from fastapi import APIRouter
from .customer_types_router import router as customer_types_router
from .customers_router import router as customers_router
from .quotations_router import router as quotations_router
from .orders_router import router as orders_router
from .dashboard_router import router as dashboard_router

router = APIRouter(prefix="/admin")

router.include_router(customer_types_router)
router.include_router(customers_router)
router.include_router(quotations_router)
router.include_router(orders_router)
router.include_router(dashboard_router)
