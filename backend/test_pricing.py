"""Pricing calculator: MRP -> PTR -> PTS and scheme net rates."""
from decimal import Decimal

from pharmabill.billing.pricing import (
    line_amount, net_rate, price_from_mrp, price_to_stockist, round_money,
)


def test_net_rate_without_free_units_is_the_list_rate():
    for rate in (Decimal("22.50"), 160, "99.99", 0.1):
        for billed in (1, 2, 7, 100):
            assert net_rate(rate, billed, 0) == round_money(rate)


def test_net_rate_is_zero_when_no_units():
    for rate in (0, 1, Decimal("22.50"), 10_000):
        assert net_rate(rate, 0, 0) == 0


def test_scheme_ten_plus_one():
    assert net_rate(100, 10, 1) == Decimal("90.91")


def test_only_free_units_cost_nothing_per_unit():
    assert net_rate(50, 0, 5) == 0


def test_net_rate_rounds_half_up():
    # 0.01 / 2 = 0.005 -> 0.01 (banker's rounding would give 0.00)
    assert net_rate("0.01", 1, 1) == Decimal("0.01")
    assert round_money("2.345") == Decimal("2.35")
    assert round_money("2.344") == Decimal("2.34")


def test_net_rate_accepts_floats_without_binary_noise():
    assert net_rate(22.5, 2, 0) == Decimal("22.50")
    assert net_rate(0.1, 3, 0) == Decimal("0.10")


def test_price_from_mrp_default_margin():
    # (100 - 20) / 1.12 = 71.428...
    assert price_from_mrp(100, 12) == Decimal("71.43")


def test_price_from_mrp_custom_margin():
    # (118 - 23.6) / 1.18 = 80
    assert price_from_mrp(118, 18, 20) == Decimal("80.00")
    # (200 - 50) / 1.05 = 142.857...
    assert price_from_mrp(200, 5, 25) == Decimal("142.86")


def test_price_to_stockist():
    # 71.43 - 7.143 = 64.287
    assert price_to_stockist(Decimal("71.43")) == Decimal("64.29")
    assert price_to_stockist(80, 15) == Decimal("68.00")


def test_line_amount_ignores_free_units():
    assert line_amount(Decimal("22.50"), 2) == Decimal("45.00")
    assert line_amount(160, 0) == 0
