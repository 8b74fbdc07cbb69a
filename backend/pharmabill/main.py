"""
PharmaBill backend: billing counter API for a pharma distributor.

ARCHITECTURE:
- Billing engine (pharmabill.billing): cart, scheme pricing, FEFO ranking,
  Schedule H1 gate, invoice aggregation. Pure in-memory.
- FastAPI host: one billing session per counter, wires the engine to the
  catalog (product source), search, receipt printer and invoice storage.
- SQLite/PostgreSQL via SQLAlchemy: catalog, parties, finalized invoices.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmabill.api.routes import billing, customers, invoices, products
from pharmabill.core.config import settings
from pharmabill.db.init_db import init_db

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup: create database tables.
    """
    logger.info("[*] Initializing database...")
    init_db()
    logger.info("[OK] Database initialized")
    yield


app = FastAPI(
    title="PharmaBill API",
    description="Pharma billing counter: scheme pricing, FEFO picking, Schedule H1 compliance.",
    version="0.1.0",
    lifespan=lifespan,
)

# Restrict CORS to specific origins and methods (not wildcards)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)

app.include_router(products.router, prefix="/products", tags=["products"])
app.include_router(customers.router, prefix="/customers", tags=["customers"])
app.include_router(billing.router, prefix="/billing", tags=["billing"])
app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])


@app.get("/health")
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}
