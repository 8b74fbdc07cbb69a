"""Cart model: merge-on-add, quantity normalisation, explicit removal, totals."""
from decimal import Decimal

from pharmabill.billing.cart import Cart, QuantityField, normalize_quantity
from pharmabill.schemas.customer import CustomerRecord


def test_adding_same_product_twice_merges(make_product):
    cart = Cart()
    dolo = make_product()

    cart.add_line(dolo)
    cart.add_line(dolo)

    assert len(cart) == 1
    assert cart.lines[0].billed_qty == 2
    assert cart.lines[0].free_qty == 0


def test_distinct_products_keep_insertion_order(make_product):
    cart = Cart()
    a, b, c = make_product(name="A"), make_product(name="B"), make_product(name="C")

    for product in (a, b, c, a):
        cart.add_line(product)

    assert [line.product.name for line in cart] == ["A", "B", "C"]
    assert [line.billed_qty for line in cart] == [2, 1, 1]


def test_merge_reprices_with_current_free_qty(make_product):
    cart = Cart()
    product = make_product(rate="100")
    cart.add_line(product)
    cart.update_quantity(0, "free", 1)

    line = cart.add_line(product)

    # (100 * 2) / 3
    assert (line.billed_qty, line.free_qty) == (2, 1)
    assert line.net_rate == Decimal("66.67")


def test_new_line_net_rate_is_list_rate(make_product):
    cart = Cart()
    line = cart.add_line(make_product(rate="22.50"))
    assert line.net_rate == Decimal("22.50")


def test_scheme_entry_updates_net_rate(make_product):
    cart = Cart()
    cart.add_line(make_product(rate="100"))

    cart.update_quantity(0, QuantityField.BILLED, 10)
    cart.update_quantity(0, QuantityField.FREE, 1)

    assert cart.lines[0].net_rate == Decimal("90.91")


def test_negative_quantity_clamps_to_zero_and_line_stays(make_product):
    cart = Cart()
    cart.add_line(make_product())

    line = cart.update_quantity(0, "billed", -5)

    assert line.billed_qty == 0
    assert len(cart) == 1
    assert line.net_rate == 0


def test_non_numeric_quantity_becomes_zero(make_product):
    cart = Cart()
    cart.add_line(make_product())
    cart.update_quantity(0, "free", 4)

    cart.update_quantity(0, "free", "abc")
    assert cart.lines[0].free_qty == 0

    cart.update_quantity(0, "billedQty", "3.9")
    assert cart.lines[0].billed_qty == 3


def test_normalize_quantity():
    assert normalize_quantity("7") == 7
    assert normalize_quantity(" 12 ") == 12
    assert normalize_quantity(2.7) == 2
    assert normalize_quantity(None) == 0
    assert normalize_quantity("") == 0
    assert normalize_quantity(-1) == 0
    assert normalize_quantity(float("nan")) == 0
    assert normalize_quantity(float("inf")) == 0


def test_update_out_of_range_or_unknown_field_is_ignored(make_product):
    cart = Cart()
    cart.add_line(make_product())

    assert cart.update_quantity(5, "billed", 3) is None
    assert cart.update_quantity(-1, "billed", 3) is None
    assert cart.update_quantity(0, "discount", 3) is None
    assert cart.lines[0].billed_qty == 1


def test_remove_line(make_product):
    cart = Cart()
    a, b = make_product(name="A"), make_product(name="B")
    cart.add_line(a)
    cart.add_line(b)

    removed = cart.remove_line(0)

    assert removed.product == a
    assert [line.product.name for line in cart] == ["B"]


def test_remove_out_of_range_is_silent(make_product):
    cart = Cart()
    cart.add_line(make_product())

    assert cart.remove_line(3) is None
    assert cart.remove_line(-1) is None
    assert len(cart) == 1


def test_add_without_product_is_ignored():
    cart = Cart()
    assert cart.add_line(None) is None
    assert cart.is_empty()


def test_total(make_product):
    cart = Cart()
    strip = make_product(name="Strip", rate="22.5")
    syrup = make_product(name="Syrup", rate="160")
    cart.add_line(strip)
    cart.add_line(strip)
    cart.add_line(syrup)

    assert cart.total() == 205.0


def test_free_units_and_zero_lines_add_nothing_to_total(make_product):
    cart = Cart()
    cart.add_line(make_product(name="A", rate="10"))
    cart.add_line(make_product(name="B", rate="99"))
    cart.update_quantity(0, "free", 5)
    cart.update_quantity(1, "billed", 0)

    assert cart.total() == Decimal("10")
    assert len(cart) == 2


def test_reset_clears_everything(make_product):
    cart = Cart()
    cart.add_line(make_product())
    cart.bind_customer(CustomerRecord(id=1, name="Shree Medicals"))
    cart.update_compliance(doctor_name="Dr. A", patient_name="P", rx_number="RX1")

    cart.reset()

    assert cart.is_empty()
    assert cart.customer is None
    assert (cart.compliance.doctor_name, cart.compliance.patient_name, cart.compliance.rx_number) == ("", "", "")


def test_update_compliance_keeps_unspecified_fields():
    cart = Cart()
    cart.update_compliance(doctor_name="Dr. A")
    cart.update_compliance(patient_name="P")

    assert cart.compliance.doctor_name == "Dr. A"
    assert cart.compliance.patient_name == "P"
    assert cart.compliance.is_complete()
