"""Catalog: FEFO-ranked listing, batch creation, MRP pricing preview."""
from decimal import Decimal

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from pharmabill.api.deps import get_db
from pharmabill.billing.fefo import is_near_expiry, rank_candidates
from pharmabill.billing.pricing import price_from_mrp, price_to_stockist
from pharmabill.core.config import settings
from pharmabill.core.exceptions import BusinessError
from pharmabill.schemas.product import PricingPreview, ProductCreate, ProductListItem, ProductRecord
from pharmabill.services import product_service
from pharmabill.services.search_service import MODE_THRESHOLDS, product_searcher

router = APIRouter()


@router.get("", response_model=list[ProductListItem])
def list_products(
    q: str = Query(""),
    mode: str = Query(settings.DEFAULT_SEARCH_MODE),
    limit: int | None = Query(None, ge=1, le=500),
    db: Session = Depends(get_db),
):
    """Catalog (or search results) ordered nearest-expiry first."""
    if mode not in MODE_THRESHOLDS:
        raise BusinessError.bad_request(f"Unknown search mode: {mode}")
    if limit is None:
        limit = settings.SEARCH_RESULT_LIMIT if q else settings.CATALOG_RESULT_LIMIT

    products = rank_candidates(
        product_service.list_products(db), query=q, search=product_searcher(mode), limit=limit
    )
    return [
        ProductListItem(**p.model_dump(), near_expiry=is_near_expiry(p, months=settings.EXPIRY_WARNING_MONTHS))
        for p in products
    ]


@router.post("", response_model=ProductRecord)
def create_product(body: ProductCreate, db: Session = Depends(get_db)):
    return product_service.create_product(db, body)


@router.get("/pricing", response_model=PricingPreview)
def pricing_preview(
    mrp: Decimal = Query(..., ge=0),
    gst_percent: Decimal = Query(Decimal("12"), ge=0),
    retailer_margin_percent: Decimal | None = Query(None, ge=0, le=100),
    stockist_margin_percent: Decimal | None = Query(None, ge=0, le=100),
):
    """PTR / PTS the catalog would derive from this MRP."""
    retailer = Decimal(str(settings.RETAILER_MARGIN_PERCENT)) if retailer_margin_percent is None else retailer_margin_percent
    stockist = Decimal(str(settings.STOCKIST_MARGIN_PERCENT)) if stockist_margin_percent is None else stockist_margin_percent
    ptr = price_from_mrp(mrp, gst_percent, retailer)
    return PricingPreview(
        mrp=mrp,
        gst_percent=gst_percent,
        retailer_margin_percent=retailer,
        stockist_margin_percent=stockist,
        ptr=ptr,
        pts=price_to_stockist(ptr, stockist),
    )


@router.get("/{product_id}", response_model=ProductRecord)
def get_product(product_id: int, db: Session = Depends(get_db)):
    product = product_service.get_product(db, product_id)
    if not product:
        raise BusinessError.not_found("Product", f"id={product_id}")
    return product
