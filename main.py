# main.py
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pavilion.routers import auth
from pavilion.routers import catalog
from pavilion.routers import sales
from pavilion.routers import storefront
from pavilion.core.config import LOG_LEVEL
from pavilion.core.db import init_models
from pavilion.middleware.request_logger import RequestLoggingMiddleware

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="Pavilion Sports Commerce API",
    description="FastAPI back office and storefront for B2B/B2C sports equipment sales",
    version="0.1.0"
)
# CORS setup
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # adjust for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestLoggingMiddleware)

# Health check endpoint
@app.get("/", tags=["Health"])
async def health_check():
    return {"status": "ok", "message": "Backend is running"}

# Register routers
app.include_router(auth.router)
app.include_router(catalog.router)
app.include_router(sales.router)
app.include_router(storefront.router)


@app.on_event("startup")
async def on_startup():
    await init_models()
