"""
Thermal receipt printing (ESC/POS).

build_receipt() renders a finalized invoice to the raw ESC/POS byte stream
for a 32-column printer. ReceiptPrinter is the printing collaborator: it
writes the stream to a device node or file, or only logs it when no device
is configured.
"""
import logging
from typing import Optional

from pharmabill.billing.checkout import Invoice
from pharmabill.core.config import settings

logger = logging.getLogger(__name__)

ESC_INIT = "\x1b\x40"
ESC_ALIGN_CENTER = "\x1b\x61\x01"
ESC_ALIGN_LEFT = "\x1b\x61\x00"
GS_CUT = "\x1d\x56\x41"

RULE = "-" * 32 + "\n"
NAME_WIDTH = 15


def build_receipt(invoice: Invoice, store_name: Optional[str] = None, tagline: Optional[str] = None) -> bytes:
    commands = [
        ESC_INIT,
        ESC_ALIGN_CENTER,
        f"{store_name or settings.STORE_NAME}\n",
        f"{tagline or settings.STORE_TAGLINE}\n",
        RULE,
        ESC_ALIGN_LEFT,
        f"Bill No: {invoice.number}\n",
        f"Date: {invoice.created_at:%d/%m/%Y}\n",
        f"Bill To: {invoice.customer_name or 'Cash Sale'}\n",
        RULE,
        "Item           Qty+Free    Amt\n",
        RULE,
    ]

    for item in invoice.items:
        name = item.product.name[:NAME_WIDTH].ljust(NAME_WIDTH)
        commands.append(f"{name} {item.billed_qty}+{item.free_qty}   {item.amount:.2f}\n")

    commands.append(RULE)
    commands.append(f"TOTAL: Rs. {invoice.total_amount:.2f}\n")
    commands.append(f"GST est. ({invoice.gst_rate * 100:.0f}%): Rs. {invoice.gst_amount:.2f}\n")
    commands.append(f"PAYABLE: Rs. {invoice.payable_amount:.2f}\n")

    if invoice.doctor_details:
        details = invoice.doctor_details
        commands.append(RULE)
        commands.append("SCHEDULE H1 - Rx REQUIRED\n")
        commands.append(f"Dr: {details.doctor_name}\n")
        commands.append(f"Patient: {details.patient_name}\n")
        if details.rx_number:
            commands.append(f"Rx No: {details.rx_number}\n")

    commands.append("\n\n\n" + GS_CUT)
    return "".join(commands).encode("ascii", errors="replace")


class ReceiptPrinter:
    """Printing collaborator. Raises OSError when the device can't be written."""

    def __init__(self, device: Optional[str] = None):
        self.device = settings.PRINTER_DEVICE if device is None else device

    def __call__(self, invoice: Invoice) -> bytes:
        data = build_receipt(invoice)
        if not self.device:
            logger.info(f"[Printer] No device configured; receipt for {invoice.number} ({len(data)} bytes) not sent")
            return data

        with open(self.device, "ab") as sink:
            sink.write(data)
        logger.info(f"[Printer] Sent {invoice.number} to {self.device}")
        return data
