"""Receipt (ESC/POS) and PDF rendering of finalized invoices."""
from pharmabill.billing.cart import Cart
from pharmabill.billing.checkout import checkout
from pharmabill.schemas.product import Schedule
from pharmabill.services.pdf_service import generate_invoice_pdf
from pharmabill.services.printer_service import GS_CUT, ReceiptPrinter, build_receipt


def _invoice(make_product, h1=False):
    cart = Cart()
    cart.add_line(make_product(name="Augmentin 625 Duo Tablet", rate="160"))
    cart.add_line(make_product(name="Dolo 650", rate="22.5"))
    cart.update_quantity(1, "billed", 10)
    cart.update_quantity(1, "free", 1)
    if h1:
        cart.add_line(make_product(name="Alprazolam 0.5mg", rate="30", schedule=Schedule.H1))
        cart.update_compliance(doctor_name="Dr. A & Sons", patient_name="P", rx_number="RX-7")
    return checkout(cart)


def test_receipt_layout(make_product):
    data = build_receipt(_invoice(make_product), store_name="TEST PHARMA", tagline="Retail")
    text = data.decode("ascii")

    assert text.startswith("\x1b\x40")
    assert "TEST PHARMA\n" in text
    assert "Bill To: Cash Sale\n" in text
    assert "Augmentin 625 D 1+0   160.00\n" in text
    assert "Dolo 650        10+1   225.00\n" in text
    assert "TOTAL: Rs. 385.00\n" in text
    assert "PAYABLE: Rs. 431.20\n" in text
    assert "SCHEDULE H1" not in text
    assert text.endswith(GS_CUT)


def test_receipt_h1_block(make_product):
    text = build_receipt(_invoice(make_product, h1=True)).decode("ascii")

    assert "SCHEDULE H1" in text
    assert "Dr: Dr. A & Sons\n" in text
    assert "Rx No: RX-7\n" in text


def test_printer_writes_to_device(make_product, tmp_path):
    device = tmp_path / "lp0"
    invoice = _invoice(make_product)

    data = ReceiptPrinter(device=str(device))(invoice)

    assert device.read_bytes() == data


def test_printer_without_device_only_renders(make_product):
    data = ReceiptPrinter(device="")(_invoice(make_product))
    assert data.startswith(b"\x1b\x40")


def test_pdf(make_product):
    buffer = generate_invoice_pdf(_invoice(make_product, h1=True))
    assert buffer.read(4) == b"%PDF"
