"""
In-memory billing cart.

Rules:
- One line per product; adding the same product again bumps billed quantity.
- Quantities are integers >= 0. Bad input is normalised, never rejected.
- A line is only removed when the cashier removes it, even at 0 + 0.
- Net rate is recomputed on every quantity change.

Nothing here raises: the counter must never be blocked by a typo.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterator, List, Optional, Tuple

from pharmabill.billing.pricing import line_amount, net_rate
from pharmabill.schemas.customer import CustomerRecord
from pharmabill.schemas.product import ProductRecord, Schedule

logger = logging.getLogger(__name__)


class QuantityField(str, Enum):
    BILLED = "billed"
    FREE = "free"


# Accepted spellings from the UI / API
_FIELD_ALIASES = {
    "billed": QuantityField.BILLED,
    "billed_qty": QuantityField.BILLED,
    "billedqty": QuantityField.BILLED,
    "free": QuantityField.FREE,
    "free_qty": QuantityField.FREE,
    "freeqty": QuantityField.FREE,
}


def parse_field(value) -> Optional[QuantityField]:
    if isinstance(value, QuantityField):
        return value
    if not isinstance(value, str):
        return None
    return _FIELD_ALIASES.get(value.strip().lower())


def normalize_quantity(value) -> int:
    """
    Coerce cashier input to a non-negative integer.

    "7" -> 7, "3.9" -> 3, "abc" -> 0, None -> 0, -5 -> 0
    """
    try:
        qty = int(value)
    except (TypeError, ValueError):
        try:
            qty = int(float(value))
        except (TypeError, ValueError, OverflowError):
            return 0
    except OverflowError:
        return 0
    return max(0, qty)


@dataclass
class CartLine:
    product: ProductRecord
    billed_qty: int = 1
    free_qty: int = 0
    net_rate: Decimal = Decimal("0.00")

    def __post_init__(self):
        self.reprice()

    def reprice(self) -> None:
        self.net_rate = net_rate(self.product.rate, self.billed_qty, self.free_qty)

    @property
    def amount(self) -> Decimal:
        return line_amount(self.product.rate, self.billed_qty)


@dataclass
class ComplianceRecord:
    """Prescriber / patient details collected for Schedule H1 sales."""
    doctor_name: str = ""
    patient_name: str = ""
    rx_number: str = ""  # Collected, never validated

    def missing_fields(self) -> List[str]:
        missing = []
        if not (self.doctor_name or "").strip():
            missing.append("doctor_name")
        if not (self.patient_name or "").strip():
            missing.append("patient_name")
        return missing

    def is_complete(self) -> bool:
        return not self.missing_fields()

    def clear(self) -> None:
        self.doctor_name = ""
        self.patient_name = ""
        self.rx_number = ""


class Cart:
    """Line items, bound customer and compliance record for one bill."""

    def __init__(self):
        self._lines: List[CartLine] = []
        self.customer: Optional[CustomerRecord] = None
        self.compliance = ComplianceRecord()

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def __iter__(self) -> Iterator[CartLine]:
        return iter(self._lines)

    def is_empty(self) -> bool:
        return not self._lines

    def _line_at(self, index) -> Optional[CartLine]:
        if not isinstance(index, int) or isinstance(index, bool):
            return None
        if 0 <= index < len(self._lines):
            return self._lines[index]
        return None

    def find_line(self, product: ProductRecord) -> Optional[CartLine]:
        for line in self._lines:
            if line.product.key == product.key:
                return line
        return None

    def add_line(self, product: Optional[ProductRecord]) -> Optional[CartLine]:
        """Add one unit of `product`, merging into its existing line if present."""
        if product is None:
            logger.warning("[Cart] add_line called without a product; ignored")
            return None

        line = self.find_line(product)
        if line is not None:
            line.billed_qty += 1
            line.reprice()
            logger.debug(f"[Cart] Merged '{product.name}' -> billed={line.billed_qty}")
            return line

        line = CartLine(product=product, billed_qty=1, free_qty=0)
        self._lines.append(line)
        logger.debug(f"[Cart] Added '{product.name}' (batch {product.batch})")
        return line

    def update_quantity(self, index: int, field_name, value) -> Optional[CartLine]:
        """Set billed or free quantity on the line at `index`. Never removes the line."""
        line = self._line_at(index)
        quantity_field = parse_field(field_name)
        if line is None or quantity_field is None:
            logger.debug(f"[Cart] Ignored quantity update index={index!r} field={field_name!r}")
            return None

        qty = normalize_quantity(value)
        if quantity_field is QuantityField.BILLED:
            line.billed_qty = qty
        else:
            line.free_qty = qty
        line.reprice()
        return line

    def remove_line(self, index: int) -> Optional[CartLine]:
        line = self._line_at(index)
        if line is None:
            return None
        del self._lines[index]
        logger.debug(f"[Cart] Removed '{line.product.name}'")
        return line

    def bind_customer(self, customer: Optional[CustomerRecord]) -> None:
        self.customer = customer

    def update_compliance(
        self,
        doctor_name: Optional[str] = None,
        patient_name: Optional[str] = None,
        rx_number: Optional[str] = None,
    ) -> ComplianceRecord:
        if doctor_name is not None:
            self.compliance.doctor_name = doctor_name
        if patient_name is not None:
            self.compliance.patient_name = patient_name
        if rx_number is not None:
            self.compliance.rx_number = rx_number
        return self.compliance

    def reset(self) -> None:
        """New bill: drop lines, customer and prescriber details."""
        self._lines.clear()
        self.customer = None
        self.compliance.clear()

    def total(self) -> Decimal:
        """Taxable amount: sum of rate x billed quantity. GST not included."""
        return sum((line.amount for line in self._lines), Decimal("0"))

    def lines_with_schedule(self, schedule: Schedule) -> List[CartLine]:
        return [line for line in self._lines if line.product.schedule == schedule]
