"""SalesPulse — FastAPI Application Entry Point.

Daily branch sales, monthly summaries and trend narratives.
"""

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from salespulse.config import settings
from salespulse.database import init_db, test_connection
from salespulse.scheduler.jobs import start_scheduler, stop_scheduler
from salespulse.api.analysis_routes import router as analysis_router
from salespulse.api.sales_routes import router as sales_router
from salespulse.api.config_routes import router as config_router
from salespulse.core.logging import get_logger

logger = get_logger("main")


IS_SERVERLESS = bool(
    os.environ.get("VERCEL") or os.environ.get("AWS_LAMBDA_FUNCTION_NAME")
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle."""
    logger.info("🚀 SalesPulse starting up...")
    logger.info(f"🌍 Environment: {'SERVERLESS' if IS_SERVERLESS else 'LOCAL'}")
    logger.info(f"🏪 Tenant {settings.app_id}: {len(settings.branch_codes)} branches")
    db_ok = test_connection()
    if db_ok:
        try:
            init_db()
        except Exception as e:
            logger.error(f"❌ Table creation failed: {e}")
    else:
        logger.error("❌ Database NOT connected — endpoints will fail")
    if not IS_SERVERLESS:
        start_scheduler()
    yield
    if not IS_SERVERLESS:
        stop_scheduler()
    logger.info("SalesPulse shut down")


app = FastAPI(
    title="SalesPulse",
    description="Record daily branch sales, aggregate them by month and read the trend.",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routers
app.include_router(sales_router)
app.include_router(analysis_router)
app.include_router(config_router)


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "salespulse",
        "version": "1.0.0",
    }
