"""
PRODUCT / CUSTOMER SEARCH SERVICE

Purpose: Match what the cashier types against the catalog or party list.
- Returns candidates in relevance order (best first)
- Does NOT decide display order for products: the billing engine re-sorts
  the candidates by expiry (FEFO)

Modes:
- fast:     loose matching, tolerates typos ("dolo65", "paracetmol")
- accurate: every typed word must appear in the field (substring match)

Scoring (per field, best field wins):
1. Normalize text (lowercase, strip punctuation, drop pack-size noise words)
2. Exact / containment / prefix matches score highest
3. Word overlap (Jaccard), with per-word typo similarity in fast mode
"""
import re
import logging
from difflib import SequenceMatcher
from typing import Callable, List, Sequence, TypeVar

from pharmabill.schemas.customer import CustomerRecord
from pharmabill.schemas.product import ProductRecord

logger = logging.getLogger(__name__)

T = TypeVar("T")

FAST = "fast"
ACCURATE = "accurate"

# Minimum confidence for a candidate to be returned
MODE_THRESHOLDS = {
    FAST: 0.5,
    ACCURATE: 0.9,
}

# Pack / form words that don't identify a product
NOISE_WORDS = {
    "tab", "tabs", "tablet", "tablets", "strip", "strips", "bottle", "bottles",
    "cap", "caps", "capsule", "capsules", "syp", "syrup",
}

# Word pairs at least this similar count as the same word (fast mode)
TYPO_SIMILARITY = 0.8


def normalize_text(text: str) -> str:
    """
    Normalize text for matching.

    Examples:
        "DOLO-650 Tablet" -> "dolo 650"
        "  Amoxyclav  625 " -> "amoxyclav 625"
    """
    if not text:
        return ""

    text = str(text).lower().strip()
    text = re.sub(r"[^\w\s]", " ", text)
    words = [w for w in text.split() if w not in NOISE_WORDS]
    return " ".join(words)


def _words_match(query_word: str, field_words: Sequence[str], fuzzy: bool) -> bool:
    for word in field_words:
        if word.startswith(query_word) or query_word == word:
            return True
        if fuzzy and SequenceMatcher(None, query_word, word).ratio() >= TYPO_SIMILARITY:
            return True
    return False


def calculate_match_confidence(query: str, value: str, mode: str = FAST) -> float:
    """
    Confidence that `value` is what the cashier meant by `query`.

    Returns: 0.0 to 1.0
    - 1.0  = exact match
    - 0.95 = field starts with the query
    - 0.9  = query contained in the field
    - 0.7+ = all query words found (prefix or typo match)
    - <0.7 = partial word overlap
    """
    query_norm = normalize_text(query)
    value_norm = normalize_text(value)

    if not query_norm or not value_norm:
        return 0.0

    if query_norm == value_norm:
        return 1.0
    if value_norm.startswith(query_norm):
        return 0.95
    if query_norm in value_norm:
        return 0.9

    query_words = query_norm.split()
    value_words = value_norm.split()

    if mode == ACCURATE:
        # Each typed word must occur somewhere in the field
        if all(any(qw in vw for vw in value_words) for qw in query_words):
            return 0.9
        return 0.0

    matched = [qw for qw in query_words if _words_match(qw, value_words, fuzzy=True)]
    if len(matched) == len(query_words):
        jaccard = len(set(query_words) & set(value_words)) / len(set(query_words) | set(value_words))
        return min(0.7 + (jaccard * 0.2), 0.89)

    return (len(matched) / len(query_words)) * 0.6


def rank_by_relevance(
    items: Sequence[T],
    query: str,
    fields: Callable[[T], Sequence[str]],
    mode: str = FAST,
) -> List[T]:
    """Filter `items` by confidence threshold and order best-first (stable on ties)."""
    if not query or not query.strip():
        return []

    if mode not in MODE_THRESHOLDS:
        logger.warning(f"[Search] Unknown mode '{mode}', falling back to '{FAST}'")
        mode = FAST
    threshold = MODE_THRESHOLDS[mode]

    scored = []
    for item in items:
        confidence = max(
            (calculate_match_confidence(query, value, mode) for value in fields(item) if value),
            default=0.0,
        )
        if confidence >= threshold:
            scored.append((confidence, item))

    scored.sort(key=lambda pair: pair[0], reverse=True)
    logger.debug(f"[Search] '{query}' ({mode}): {len(scored)}/{len(items)} matched")
    return [item for _, item in scored]


def search_products(products: Sequence[ProductRecord], query: str, mode: str = FAST) -> List[ProductRecord]:
    """Match on product name and batch code."""
    return rank_by_relevance(products, query, lambda p: (p.name, p.batch), mode)


def search_customers(customers: Sequence[CustomerRecord], query: str, mode: str = FAST) -> List[CustomerRecord]:
    """Match on party name, GSTIN and mobile number."""
    return rank_by_relevance(customers, query, lambda c: (c.name, c.gstin or "", c.mobile), mode)


def product_searcher(mode: str = FAST) -> Callable[[Sequence[ProductRecord], str], List[ProductRecord]]:
    """Search collaborator bound to a mode, for the FEFO ranker."""
    def _search(products: Sequence[ProductRecord], query: str) -> List[ProductRecord]:
        return search_products(products, query, mode)
    return _search
