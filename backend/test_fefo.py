"""FEFO ranking: nearest expiry first, stable, rank-then-truncate."""
from datetime import date

from pharmabill.billing.fefo import (
    add_months, is_near_expiry, parse_expiry, rank_by_expiry, rank_candidates,
)


def test_ranks_ascending_by_expiry(make_product):
    late = make_product(name="C", expiry="2026-01-01")
    early = make_product(name="A", expiry="2024-06-30")
    middle = make_product(name="B", expiry="2025-12-31")

    ranked = rank_by_expiry([late, early, middle])

    assert [p.expiry for p in ranked] == ["2024-06-30", "2025-12-31", "2026-01-01"]


def test_missing_and_unparsable_expiry_sort_last(make_product):
    unknown = make_product(name="unknown", expiry=None)
    garbage = make_product(name="garbage", expiry="soon")
    dated = make_product(name="dated", expiry="2030-01-01")

    ranked = rank_by_expiry([unknown, garbage, dated])

    assert [p.name for p in ranked] == ["dated", "unknown", "garbage"]


def test_equal_expiry_keeps_input_order(make_product):
    products = [make_product(name=n, expiry="2026-06-30") for n in ("first", "second", "third")]
    products.insert(1, make_product(name="earliest", expiry="2025-01-01"))

    ranked = rank_by_expiry(products)

    assert [p.name for p in ranked] == ["earliest", "first", "second", "third"]


def test_rank_by_expiry_does_not_mutate_input(make_product):
    products = [make_product(expiry="2027-01-01"), make_product(expiry="2025-01-01")]
    before = list(products)
    rank_by_expiry(products)
    assert products == before


def test_ranking_happens_before_truncation(make_product):
    # Catalog order is latest-expiry first; the earliest batches sit at the end
    catalog = [make_product(name=f"P{i}", expiry=f"{2080 - i}-01-01") for i in range(60)]

    top = rank_candidates(catalog, limit=5)

    assert [p.name for p in top] == ["P59", "P58", "P57", "P56", "P55"]


def test_query_uses_search_collaborator(make_product):
    dolo_new = make_product(name="Dolo 650", expiry="2027-06-30")
    crocin = make_product(name="Crocin", expiry="2024-01-01")
    dolo_old = make_product(name="Dolo 650", expiry="2026-01-31")
    calls = []

    def search(products, query):
        calls.append(query)
        return [p for p in products if query.lower() in p.name.lower()]

    ranked = rank_candidates([dolo_new, crocin, dolo_old], query=" dolo ", search=search)

    assert calls == ["dolo"]
    assert ranked == [dolo_old, dolo_new]


def test_no_query_ranks_whole_catalog(make_product):
    a = make_product(expiry="2027-01-01")
    b = make_product(expiry="2026-01-01")

    def search(products, query):
        raise AssertionError("search must not run without a query")

    assert rank_candidates([a, b], query="", search=search) == [b, a]


def test_parse_expiry_formats():
    assert parse_expiry("2025-12-31") == date(2025, 12, 31)
    assert parse_expiry("2025-12") == date(2025, 12, 1)
    assert parse_expiry("31/12/2025") == date(2025, 12, 31)
    assert parse_expiry("12/2025") == date(2025, 12, 1)
    assert parse_expiry("2025-12-31T00:00:00") == date(2025, 12, 31)
    assert parse_expiry(date(2025, 1, 2)) == date(2025, 1, 2)
    assert parse_expiry("") is None
    assert parse_expiry("N/A") is None
    assert parse_expiry(None) is None


def test_add_months_clamps_day():
    assert add_months(date(2025, 11, 30), 3) == date(2026, 2, 28)
    assert add_months(date(2024, 1, 15), 12) == date(2025, 1, 15)


def test_near_expiry_window(make_product):
    today = date(2025, 1, 15)
    assert is_near_expiry(make_product(expiry="2025-03-31"), today=today)
    assert not is_near_expiry(make_product(expiry="2025-04-15"), today=today)
    assert not is_near_expiry(make_product(expiry=None), today=today)
