"""
Audit logging for compliance-relevant billing events.

Schedule H1 sales must leave a trail of who prescribed and who received the
drug. Every finalized invoice, every refused H1 checkout and every bulk
customer import is written as one JSON line to the "audit" logger, which can
be shipped separately from application logs.
"""
import logging
import json
from datetime import datetime, timezone
from typing import Optional, Sequence

# Separate logger for audit events (can be shipped to centralized logging)
audit_logger = logging.getLogger("audit")


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AuditLog:
    """Central audit logging for billing and compliance events."""

    @staticmethod
    def log_checkout(
        session_id: str,
        invoice_number: str,
        customer_name: str,
        line_count: int,
        payable_amount: str,
        h1_products: Sequence[str] = (),
        doctor_name: str = "",
        patient_name: str = "",
        rx_number: str = "",
    ):
        """
        Log a finalized invoice.

        For H1 sales the prescriber and patient are included so the register
        can be reconstructed from the audit stream alone.

        Usage:
            AuditLog.log_checkout("counter-1", "INV-...", "Cash Sale", 3, "229.60")
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "billing.checkout",
            "session_id": session_id,
            "invoice_number": invoice_number,
            "customer": customer_name,
            "line_count": line_count,
            "payable_amount": payable_amount,
        }

        if h1_products:
            log_entry["schedule_h1"] = {
                "products": list(h1_products),
                "doctor_name": doctor_name,
                "patient_name": patient_name,
                "rx_number": rx_number,
            }

        audit_logger.info(json.dumps(log_entry))

    @staticmethod
    def log_compliance_block(
        session_id: str,
        h1_products: Sequence[str],
        reason: str,
    ):
        """
        Log a checkout refused for missing doctor/patient details.

        Usage:
            AuditLog.log_compliance_block("counter-1", ["Alprazolam 0.5mg"], "Doctor name missing")
        """
        log_entry = {
            "timestamp": _now(),
            "event_severity": "WARNING",
            "event_type": "compliance.h1_blocked",
            "session_id": session_id,
            "products": list(h1_products),
            "reason": reason,
        }

        audit_logger.warning(json.dumps(log_entry))

    @staticmethod
    def log_customer_import(
        source: str,
        customer_type: str,
        imported: int,
        skipped: int,
        details: Optional[str] = None,
    ):
        """
        Log a bulk customer import from a spreadsheet.

        Usage:
            AuditLog.log_customer_import("parties.xlsx", "wholesale", imported=120, skipped=3)
        """
        log_entry = {
            "timestamp": _now(),
            "event_type": "customers.import",
            "source": source,
            "customer_type": customer_type,
            "imported": imported,
            "skipped": skipped,
        }

        if details:
            log_entry["details"] = details

        audit_logger.info(json.dumps(log_entry))
