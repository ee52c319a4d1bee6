import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.core.config import settings
from shared.core.database import engine, Base
from shared.exception_handler import setup_exception_handlers
from shared.utils.datetime_utils import utc_now

from .models import inventory  # noqa: F401  registers every table on Base
from .router.inventory import (
    assets_router,
    assignments_router,
    audit_logs_router,
    maintenance_router,
    reports_router,
    users_router)

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)

app = FastAPI(title="IT Inventory Service API")

# Create all tables
Base.metadata.create_all(bind=engine)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)


@app.get("/api/health")
def health():
    return {"status": "ok", "timestamp": utc_now().isoformat()}


# Include routers
app.include_router(assets_router.router)
app.include_router(assignments_router.router)
app.include_router(maintenance_router.router)
app.include_router(users_router.router)
app.include_router(reports_router.router)
app.include_router(audit_logs_router.router)
