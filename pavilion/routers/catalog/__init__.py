from fastapi import APIRouter
from .products_router import router as products_router
from .taxonomy_router import router as taxonomy_router

router = APIRouter(prefix="/admin")

router.include_router(products_router)
router.include_router(taxonomy_router)
