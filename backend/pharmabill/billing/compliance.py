"""
Schedule H1 compliance gate.

================================================================================
PHARMACY COMPLIANCE
================================================================================

Schedule H1 drugs may only be sold against a prescription, and the sale
register must name the prescribing doctor and the patient. The gate is
evaluated from scratch on every checkout attempt:

- no H1 line in the cart                       -> CLEAR
- H1 present, doctor AND patient names given   -> CLEAR
- otherwise                                    -> BLOCKED

Rx number is recorded when given but never checked.
================================================================================
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Tuple

from pharmabill.billing.cart import ComplianceRecord
from pharmabill.schemas.product import Schedule

logger = logging.getLogger(__name__)


# Every schedule must be listed; only H1 needs a prescriber record at the counter
PRESCRIBER_RECORD_REQUIRED = {
    Schedule.GENERAL: False,
    Schedule.H: False,
    Schedule.H1: True,
    Schedule.X: False,
}


class GateState(str, Enum):
    CLEAR = "CLEAR"
    BLOCKED = "BLOCKED"


@dataclass(frozen=True)
class GateDecision:
    state: GateState
    reason: str = ""
    h1_products: Tuple[str, ...] = ()
    missing_fields: Tuple[str, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.state is GateState.CLEAR

    @property
    def requires_record(self) -> bool:
        return bool(self.h1_products)


def requires_prescriber_record(schedule: Schedule) -> bool:
    return PRESCRIBER_RECORD_REQUIRED[schedule]


def evaluate(lines: Iterable, record: ComplianceRecord) -> GateDecision:
    """Decide whether checkout may proceed. `lines` are cart or invoice lines (anything with .product)."""
    h1_products = tuple(
        line.product.name for line in lines
        if requires_prescriber_record(line.product.schedule)
    )

    if not h1_products:
        return GateDecision(state=GateState.CLEAR)

    missing = tuple(record.missing_fields())
    if not missing:
        logger.info(f"[ComplianceGate] H1 sale cleared: {', '.join(h1_products)}")
        return GateDecision(state=GateState.CLEAR, h1_products=h1_products)

    labels = {"doctor_name": "doctor name", "patient_name": "patient name"}
    reason = (
        f"Schedule H1 items ({', '.join(h1_products)}) require "
        f"{' and '.join(labels[f] for f in missing)}"
    )
    logger.warning(f"[ComplianceGate] BLOCKED: {reason}")
    return GateDecision(
        state=GateState.BLOCKED,
        reason=reason,
        h1_products=h1_products,
        missing_fields=missing,
    )
