from fastapi import APIRouter
from .catalog_router import router as catalog_router
from .enquiries_router import router as enquiries_router
from .b2b_router import router as b2b_router

router = APIRouter(prefix="/store")

router.include_router(catalog_router)
router.include_router(enquiries_router)
router.include_router(b2b_router)
