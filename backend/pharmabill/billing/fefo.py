"""
FEFO (First-Expiry-First-Out) ranking for the product picker.

Candidates are shown nearest-expiry first so the counter dispenses the
oldest batch. Ranking always runs on the full candidate set; callers
truncate afterwards.
"""
import calendar
import logging
from datetime import date, datetime
from typing import Callable, List, Optional, Sequence

from pharmabill.schemas.product import ProductRecord

logger = logging.getLogger(__name__)

# External matcher: (products, query) -> candidates in relevance order
SearchFn = Callable[[Sequence[ProductRecord], str], List[ProductRecord]]

EXPIRY_FORMATS = ("%Y-%m-%d", "%Y-%m", "%d-%m-%Y", "%d/%m/%Y", "%m/%Y")


def parse_expiry(value) -> Optional[date]:
    """Parse an expiry value to a date. Returns None when missing or unparsable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    for fmt in EXPIRY_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    # Timestamps such as 2025-12-31T00:00:00
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return None


def _expiry_sort_key(product: ProductRecord):
    expiry = parse_expiry(product.expiry)
    # Unparsable / missing expiry sorts last
    return (expiry is None, expiry or date.max)


def rank_by_expiry(products: Sequence[ProductRecord]) -> List[ProductRecord]:
    """
    Sort ascending by expiry date.

    Stable: products with equal expiry keep their incoming order (search
    relevance, or catalog order).
    """
    return sorted(products, key=_expiry_sort_key)


def rank_candidates(
    products: Sequence[ProductRecord],
    query: Optional[str] = None,
    search: Optional[SearchFn] = None,
    limit: Optional[int] = None,
) -> List[ProductRecord]:
    """
    Narrow the catalog with the search collaborator (when there is a query),
    FEFO-rank every candidate, then cap the result to `limit`.
    """
    if query and query.strip() and search is not None:
        candidates = search(products, query.strip())
    else:
        candidates = list(products)

    ranked = rank_by_expiry(candidates)
    logger.debug(f"[FEFO] Ranked {len(ranked)} candidates for query={query!r}")

    if limit is not None and limit >= 0:
        return ranked[:limit]
    return ranked


def add_months(start: date, months: int) -> date:
    month_index = start.month - 1 + months
    year = start.year + month_index // 12
    month = month_index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def is_near_expiry(product: ProductRecord, today: Optional[date] = None, months: int = 3) -> bool:
    """True when the batch expires before `today + months`. Unknown expiry is not flagged."""
    expiry = parse_expiry(product.expiry)
    if expiry is None:
        return False
    today = today or date.today()
    return expiry < add_months(today, months)
