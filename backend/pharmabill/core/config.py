"""Application configuration.

Environment variables override all defaults. A `.env` file next to the
backend directory is loaded for local development.
"""

import os
from pathlib import Path
from typing import List

from dotenv import load_dotenv

_BACKEND_DIR = Path(__file__).resolve().parents[2]
load_dotenv(dotenv_path=_BACKEND_DIR / ".env", override=False)


def _env_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


class Settings:
    # Database Configuration (storage collaborator)
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./pharmabill.db")

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")
    DEBUG: bool = ENVIRONMENT == "development"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

    # Billing
    # Flat display estimate applied to the taxable total, not per-line GST
    ESTIMATED_GST_RATE: float = float(os.getenv("ESTIMATED_GST_RATE", "0.12"))
    RETAILER_MARGIN_PERCENT: float = float(os.getenv("RETAILER_MARGIN_PERCENT", "20"))
    STOCKIST_MARGIN_PERCENT: float = float(os.getenv("STOCKIST_MARGIN_PERCENT", "10"))
    # Counters kept in memory; least recently used idle counters are dropped first
    MAX_BILLING_SESSIONS: int = int(os.getenv("MAX_BILLING_SESSIONS", "16"))

    # Product search / FEFO listing
    SEARCH_RESULT_LIMIT: int = int(os.getenv("SEARCH_RESULT_LIMIT", "20"))
    CATALOG_RESULT_LIMIT: int = int(os.getenv("CATALOG_RESULT_LIMIT", "50"))
    DEFAULT_SEARCH_MODE: str = os.getenv("DEFAULT_SEARCH_MODE", "fast")  # fast | accurate
    EXPIRY_WARNING_MONTHS: int = int(os.getenv("EXPIRY_WARNING_MONTHS", "3"))

    # Store identity (receipt / PDF header)
    STORE_NAME: str = os.getenv("STORE_NAME", "GOPI PHARMA DISTRIBUTORS")
    STORE_TAGLINE: str = os.getenv("STORE_TAGLINE", "Wholesale & Retail")

    # Customer import
    DEFAULT_STATE_CODE: str = os.getenv("DEFAULT_STATE_CODE", "27")  # Maharashtra

    # Receipt printer sink (file path or device node); empty = log only
    PRINTER_DEVICE: str = os.getenv("PRINTER_DEVICE", "")

    # CORS (specific origins only, no wildcards)
    CORS_ORIGINS: List[str] = _env_list(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
    )


settings = Settings()
