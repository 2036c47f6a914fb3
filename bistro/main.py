import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bistro.core.config import CORS_ORIGINS, DATABASE_URL
from bistro.core.database import Base, engine
from bistro.core.logging_setup import configure_logging
from bistro.core.startup_checks import (
    ensure_migrations_applied,
    report_payment_configuration,
    validate_database_environment,
)
from bistro.errors import register_error_handlers
from bistro.middleware.observability import ObservabilityMiddleware
import bistro.models  # registers every table on Base.metadata
import bistro.services.event_handlers  # wires mutation events to the live feeds

from bistro.routers.analytics import router as analytics_router
from bistro.routers.carts import router as carts_router
from bistro.routers.internal_metrics import router as internal_metrics_router
from bistro.routers.kitchen import router as kitchen_router
from bistro.routers.menu import router as menu_router
from bistro.routers.orders import router as orders_router
from bistro.routers.payments import router as payments_router
from bistro.routers.realtime import router as realtime_router
from bistro.routers.settings import router as settings_router
from bistro.routers.staff import router as staff_router
from bistro.routers.tables import router as tables_router

configure_logging()

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Bistro Live API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

# Preflight for every route, including /api/create-payment-intent
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=CORS_ORIGINS != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)
register_error_handlers(app)


def _startup_tasks() -> None:
    try:
        validate_database_environment()
        if DATABASE_URL.startswith("sqlite"):
            # Development database; Alembic owns every other schema
            Base.metadata.create_all(bind=engine)
        else:
            ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
        report_payment_configuration()
    except Exception:
        logger.exception("startup failed")
        raise


app.include_router(orders_router)
app.include_router(kitchen_router)
app.include_router(menu_router)
app.include_router(settings_router)
app.include_router(tables_router)
app.include_router(staff_router)
app.include_router(carts_router)
app.include_router(analytics_router)
app.include_router(payments_router)
app.include_router(realtime_router)
app.include_router(internal_metrics_router)


@app.get("/")
def root():
    return {"status": "ok"}


@app.get("/api/health")
def health():
    return {"status": "ok"}
