"""HTTP flow: catalog, counter billing with H1 retry, stored invoices, imports."""
from pharmabill.api import deps
from pharmabill.core.config import settings


def _create(client, **body):
    payload = {"mrp": "100", "gst_percent": "12", **body}
    resp = client.post("/products", json=payload)
    assert resp.status_code == 200, resp.text
    return resp.json()


def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_create_product_derives_trade_prices(client):
    product = _create(client, name="Dolo 650", batch="DL1")

    assert product["ptr"] == "71.43"
    assert product["pts"] == "64.29"
    assert product["rate"] == "71.43"
    assert product["schedule"] == "General"


def test_pricing_preview(client):
    resp = client.get("/products/pricing", params={"mrp": "118", "gst_percent": "18"})
    assert resp.json()["ptr"] == "80.00"
    assert resp.json()["pts"] == "72.00"


def test_product_listing_is_fefo(client):
    _create(client, name="Dolo 650", batch="LATE", expiry="2027-06-30")
    _create(client, name="Crocin", batch="C1", expiry="2024-01-01")
    _create(client, name="Dolo 650", batch="EARLY", expiry="2026-01-31")

    everything = client.get("/products").json()
    dolo = client.get("/products", params={"q": "dolo"}).json()

    assert [p["batch"] for p in everything] == ["C1", "EARLY", "LATE"]
    assert [p["batch"] for p in dolo] == ["EARLY", "LATE"]
    assert everything[0]["near_expiry"] is True


def test_unknown_search_mode(client):
    assert client.get("/products", params={"mode": "psychic"}).status_code == 400


def test_counter_flow_with_schedule_h1(client):
    plain = _create(client, name="Dolo 650", rate="22.5")
    h1 = _create(client, name="Alprazolam 0.5mg", rate="160", schedule="H1")

    client.post("/billing/c1/lines", json={"product_id": plain["id"]})
    client.post("/billing/c1/lines", json={"product_id": plain["id"]})
    cart = client.post("/billing/c1/lines", json={"product_id": h1["id"]}).json()

    assert [line["billed_qty"] for line in cart["lines"]] == [2, 1]
    assert cart["total"] == "205.00"
    assert cart["compliance"]["required"] is True

    blocked = client.post("/billing/c1/checkout")
    assert blocked.status_code == 428
    assert blocked.json()["detail"]["kind"] == "ComplianceRequired"

    client.put("/billing/c1/compliance", json={"doctor_name": "Dr. A", "patient_name": "P"})
    done = client.post("/billing/c1/checkout")

    assert done.status_code == 200, done.text
    body = done.json()
    assert body["invoice"]["payable_amount"] == "229.60"
    assert body["invoice"]["doctor_details"]["doctor_name"] == "Dr. A"
    assert body["delivery"] == {"storage": True, "printer": True}

    stored = client.get("/invoices").json()
    assert len(stored) == 1
    assert stored[0]["schedule_h1"] is True

    number = body["invoice"]["number"]
    reloaded = client.get(f"/invoices/{number}").json()
    assert reloaded["total_amount"] == "205.00"
    assert [i["product"]["name"] for i in reloaded["items"]] == ["Dolo 650", "Alprazolam 0.5mg"]

    receipt = client.get("/billing/c1/last-invoice/receipt")
    assert receipt.content.startswith(b"\x1b\x40")
    assert client.get(f"/invoices/{number}/pdf").content[:4] == b"%PDF"


def test_quantity_edits_never_fail(client):
    product = _create(client, name="Dolo 650", rate="100")
    client.post("/billing/c2/lines", json={"product_id": product["id"]})

    cart = client.patch("/billing/c2/lines/0", json={"field": "billed", "value": 10}).json()
    cart = client.patch("/billing/c2/lines/0", json={"field": "free", "value": "1"}).json()
    assert cart["lines"][0]["net_rate"] == "90.91"

    cart = client.patch("/billing/c2/lines/0", json={"field": "billed", "value": -5}).json()
    assert cart["lines"][0]["billed_qty"] == 0
    assert len(cart["lines"]) == 1

    cart = client.patch("/billing/c2/lines/0", json={"field": "free", "value": "abc"}).json()
    assert cart["lines"][0]["free_qty"] == 0

    assert client.patch("/billing/c2/lines/9", json={"field": "free", "value": 1}).status_code == 200
    assert len(client.delete("/billing/c2/lines/9").json()["lines"]) == 1
    assert client.delete("/billing/c2/lines/0").json()["lines"] == []


def test_sessions_are_independent(client):
    product = _create(client, name="Dolo 650")
    client.post("/billing/a/lines", json={"product_id": product["id"]})

    assert len(client.get("/billing/a/cart").json()["lines"]) == 1
    assert client.get("/billing/b/cart").json()["lines"] == []


def test_empty_checkout_and_reset(client):
    product = _create(client, name="Dolo 650")

    assert client.post("/billing/c3/checkout").status_code == 400

    client.post("/billing/c3/lines", json={"product_id": product["id"]})
    client.put("/billing/c3/compliance", json={"doctor_name": "Dr. A"})
    cart = client.post("/billing/c3/reset").json()

    assert cart["lines"] == []
    assert cart["compliance"]["doctor_name"] == ""


def test_unknown_product_or_customer(client):
    assert client.post("/billing/c4/lines", json={"product_id": 999}).status_code == 404
    assert client.put("/billing/c4/customer", json={"customer_id": 999}).status_code == 404
    assert client.get("/billing/c4/last-invoice/receipt").status_code == 404


def test_bound_customer_on_invoice(client):
    product = _create(client, name="Dolo 650")
    customer = client.post("/customers", json={"name": "Shree Medicals", "type": "wholesale"}).json()

    client.post("/billing/c5/lines", json={"product_id": product["id"]})
    client.put("/billing/c5/customer", json={"customer_id": customer["id"]})
    invoice = client.post("/billing/c5/checkout").json()["invoice"]

    assert invoice["customer_name"] == "Shree Medicals"
    assert invoice["customer_id"] == customer["id"]


def test_customer_import_and_search(client):
    csv = b"Party Name,GST No,Phone\nShree Medicals,27ABCDE1234F1Z5,9876543210\n,,\nOm Pharma,,9123456780\n"

    resp = client.post(
        "/customers/import",
        files={"file": ("parties.csv", csv, "text/csv")},
        data={"customer_type": "wholesale"},
    )

    assert resp.status_code == 200, resp.text
    assert resp.json()["imported"] == 2
    assert resp.json()["skipped"] == 1
    assert [c["name"] for c in client.get("/customers", params={"q": "91234"}).json()] == ["Om Pharma"]


def test_customer_import_rejects_unknown_format(client):
    resp = client.post("/customers/import", files={"file": ("parties.txt", b"x", "text/plain")})
    assert resp.status_code == 400


def test_idle_counters_are_dropped_when_full(client, monkeypatch):
    monkeypatch.setattr(settings, "MAX_BILLING_SESSIONS", 2)
    product = _create(client, name="Dolo 650")

    client.post("/billing/a/lines", json={"product_id": product["id"]})
    client.get("/billing/b/cart")
    client.post("/billing/c/lines", json={"product_id": product["id"]})

    assert list(deps._billing_sessions) == ["a", "c"]
    assert len(client.get("/billing/a/cart").json()["lines"]) == 1

    resp = client.get("/billing/d/cart")
    assert resp.status_code == 503
    assert list(deps._billing_sessions) == ["c", "a"]

    client.post("/billing/c/reset")
    assert client.get("/billing/d/cart").status_code == 200
    assert list(deps._billing_sessions) == ["a", "d"]
