"""
Billing session: one counter, one active cart.

The session is the host for the engine. It wires the cart to the product
source and search collaborator for the picker, and hands finalized invoices
to the printer and storage collaborators. Collaborator failures are logged
and reported, never allowed to leak into the cart.
"""
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Sequence

from pharmabill.billing import checkout as checkout_module
from pharmabill.billing.cart import Cart, CartLine, ComplianceRecord
from pharmabill.billing.checkout import Invoice, Refusal, RefusalKind
from pharmabill.billing.compliance import requires_prescriber_record
from pharmabill.billing.fefo import SearchFn, rank_candidates
from pharmabill.core.audit import AuditLog
from pharmabill.core.config import settings
from pharmabill.schemas.customer import CustomerRecord
from pharmabill.schemas.product import ProductRecord

logger = logging.getLogger(__name__)

ProductSource = Callable[[], Sequence[ProductRecord]]
InvoiceSink = Callable[[Invoice], Any]


class BillingSession:
    """
    Usage:
        session = BillingSession("counter-1", product_source=catalog, printer=printer)
        for product in session.search_products("dolo"):
            ...
        session.add_product(product)
        result = session.checkout()
    """

    def __init__(
        self,
        session_id: str = "counter-1",
        product_source: Optional[ProductSource] = None,
        search: Optional[SearchFn] = None,
        printer: Optional[InvoiceSink] = None,
        storage: Optional[InvoiceSink] = None,
        estimated_gst_rate=None,
    ):
        self.session_id = session_id
        self.product_source = product_source
        self.search = search
        self.printer = printer
        self.storage = storage
        self.estimated_gst_rate = estimated_gst_rate
        self.cart = Cart()
        # Held around cart events and checkout; one counter can get concurrent requests
        self.lock = threading.RLock()
        self.last_invoice: Optional[Invoice] = None
        self.last_delivery: Dict[str, bool] = {}

    # ------------------------------------------------------------------
    # Product picker
    # ------------------------------------------------------------------

    def search_products(self, query: str = "", limit: Optional[int] = None) -> List[ProductRecord]:
        """FEFO-ranked candidates: search results for a query, else the catalog."""
        products = list(self.product_source()) if self.product_source else []
        if limit is None:
            limit = settings.SEARCH_RESULT_LIMIT if query else settings.CATALOG_RESULT_LIMIT
        try:
            return rank_candidates(products, query=query, search=self.search, limit=limit)
        except Exception as e:
            logger.error(
                f"[BillingSession] {self.session_id}: search failed for {query!r}, "
                f"falling back to catalog order: {type(e).__name__}: {e}",
                exc_info=True,
            )
            return rank_candidates(products, limit=limit)

    # ------------------------------------------------------------------
    # Cart events
    # ------------------------------------------------------------------

    def add_product(self, product: Optional[ProductRecord]) -> Optional[CartLine]:
        with self.lock:
            return self.cart.add_line(product)

    def update_quantity(self, index: int, field_name, value) -> Optional[CartLine]:
        with self.lock:
            return self.cart.update_quantity(index, field_name, value)

    def remove_line(self, index: int) -> Optional[CartLine]:
        with self.lock:
            return self.cart.remove_line(index)

    def bind_customer(self, customer: Optional[CustomerRecord]) -> None:
        with self.lock:
            self.cart.bind_customer(customer)

    def update_compliance(self, **fields) -> ComplianceRecord:
        with self.lock:
            return self.cart.update_compliance(**fields)

    def new_bill(self) -> None:
        """Keyboard 'new bill' (F2)."""
        with self.lock:
            self.cart.reset()
        logger.info(f"[BillingSession] {self.session_id}: new bill")

    # ------------------------------------------------------------------
    # Checkout
    # ------------------------------------------------------------------

    def checkout(self):
        """
        Keyboard 'save & print' (F10).

        Returns the Invoice, or a Refusal the caller must act on (add items,
        or collect doctor/patient names and call checkout again).
        """
        with self.lock:
            result = checkout_module.checkout(self.cart, estimated_gst_rate=self.estimated_gst_rate)

            if isinstance(result, Refusal):
                if result.kind is RefusalKind.COMPLIANCE_REQUIRED:
                    AuditLog.log_compliance_block(
                        self.session_id,
                        [line.product.name for line in self.cart if requires_prescriber_record(line.product.schedule)],
                        result.detail,
                    )
                return result

            self.last_invoice = result
            self._audit(result)
            self.last_delivery = self._deliver(result)
            return result

    def is_idle(self) -> bool:
        """No bill in progress: safe to drop this counter."""
        with self.lock:
            return self.cart.is_empty()

    def _audit(self, invoice: Invoice) -> None:
        h1_products = [
            item.product.name for item in invoice.items
            if requires_prescriber_record(item.product.schedule)
        ]
        details = invoice.doctor_details
        AuditLog.log_checkout(
            self.session_id,
            invoice.number,
            invoice.customer_name,
            len(invoice.items),
            str(invoice.payable_amount),
            h1_products=h1_products,
            doctor_name=details.doctor_name if details else "",
            patient_name=details.patient_name if details else "",
            rx_number=details.rx_number if details else "",
        )

    def _deliver(self, invoice: Invoice) -> Dict[str, bool]:
        """Hand the invoice to printer and storage. Failures are reported, not raised."""
        delivery = {}
        for name, sink in (("storage", self.storage), ("printer", self.printer)):
            if sink is None:
                continue
            try:
                sink(invoice)
                delivery[name] = True
            except Exception as e:
                logger.error(
                    f"[BillingSession] {self.session_id}: {name} failed for {invoice.number}: "
                    f"{type(e).__name__}: {e}",
                    exc_info=True,
                )
                delivery[name] = False
        return delivery
