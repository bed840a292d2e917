import logging

from fastapi import FastAPI, Depends
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import get_settings, Settings
from app.db.session import get_db
from app.api.v1.endpoints import reconciliation

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Reconciles bank transactions against open customer invoices",
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(reconciliation.router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "status": "running",
    }


@app.get("/health")
def health_check(db: Session = Depends(get_db)):
    """Health check endpoint with database connectivity test."""
    try:
        db.execute(text("SELECT 1"))
        db_status = "healthy"
    except SQLAlchemyError as e:
        db_status = f"unhealthy: {str(e)}"

    return {
        "status": "healthy" if db_status == "healthy" else "degraded",
        "components": {
            "api": "healthy",
            "database": db_status,
        },
        "version": settings.app_version,
    }


@app.get("/config")
async def get_config(settings: Settings = Depends(get_settings)):
    """Get application configuration (non-sensitive values)."""
    return {
        "app_name": settings.app_name,
        "app_version": settings.app_version,
        "app_env": settings.app_env,
        "matching": {
            "min_candidate_confidence": settings.min_candidate_confidence,
            "auto_apply_threshold": settings.auto_apply_threshold,
            "amount_epsilon": str(settings.amount_epsilon),
            "overpayment_tolerance": str(settings.overpayment_tolerance),
            "weights": {
                "exact_amount": settings.exact_amount_weight,
                "partial_amount": settings.partial_amount_weight,
                "invoice_number": settings.invoice_number_weight,
                "customer_name": settings.customer_name_weight,
                "date_near": settings.date_near_weight,
                "date_far": settings.date_far_weight,
            },
            "date_windows": {
                "near_days": settings.date_near_days,
                "far_days": settings.date_far_days,
            },
        },
        "payments": {
            "method": settings.default_payment_method,
            "currency": settings.default_currency,
        },
    }
