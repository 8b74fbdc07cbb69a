"""
Indian pharma pricing calculator.

Reverse-calculates trade prices from MRP and works out the effective
per-unit cost of a free-goods scheme (e.g. 10+1).

All arithmetic is done on Decimal and rounded half-up to paise, so the same
inputs always give the same printed rate.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

PAISE = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0.00")


def to_decimal(value: Number) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Round half-up to 2 decimal places."""
    return to_decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def price_from_mrp(mrp: Number, gst_percent: Number, retailer_margin_percent: Number = 20) -> Decimal:
    """
    Price to Retailer from MRP.

    PTR = (MRP - MRP * margin%) / (1 + GST% / 100)

    Example:
        price_from_mrp(100, 12) -> Decimal("71.43")
    """
    mrp = to_decimal(mrp)
    margin_amount = mrp * to_decimal(retailer_margin_percent) / HUNDRED
    taxable_value = (mrp - margin_amount) / (1 + to_decimal(gst_percent) / HUNDRED)
    return round_money(taxable_value)


def price_to_stockist(ptr: Number, stockist_margin_percent: Number = 10) -> Decimal:
    """
    Price to Stockist from PTR.

    PTS = PTR - PTR * margin%
    """
    ptr = to_decimal(ptr)
    margin_amount = ptr * to_decimal(stockist_margin_percent) / HUNDRED
    return round_money(ptr - margin_amount)


def net_rate(rate: Number, billed_qty: int, free_qty: int) -> Decimal:
    """
    Effective cost per unit received, free goods included.

    net = (rate * billed) / (billed + free); 0 when no units at all.

    Example:
        net_rate(100, 10, 1) -> Decimal("90.91")
    """
    total_units = billed_qty + free_qty
    if total_units == 0:
        return ZERO
    total_cost = to_decimal(rate) * billed_qty
    return round_money(total_cost / total_units)


def line_amount(rate: Number, billed_qty: int) -> Decimal:
    """Amount charged for a line. Free units cost nothing."""
    return to_decimal(rate) * billed_qty
