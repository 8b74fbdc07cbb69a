"""Seed a demo catalog (mixed schedules and expiries) and party list.

Usage: python seed_catalog.py
"""
from decimal import Decimal

from pharmabill.db.init_db import init_db
from pharmabill.db.session import SessionLocal
from pharmabill.models.customer import Customer
from pharmabill.models.product import Product
from pharmabill.schemas.customer import CustomerCreate, CustomerType
from pharmabill.schemas.product import ProductCreate, Schedule
from pharmabill.services.customer_service import save_customers
from pharmabill.services.product_service import create_product

PRODUCTS = [
    # name, batch, expiry, mrp, gst%, schedule, manufacturer, hsn, stock
    ("Dolo 650", "DL2401", "2026-03-31", 33.60, 12, Schedule.GENERAL, "Micro Labs", "30049099", 400),
    ("Dolo 650", "DL2407", "2027-01-31", 33.60, 12, Schedule.GENERAL, "Micro Labs", "30049099", 600),
    ("Paracetamol 500mg", "PC1193", "2026-11-30", 18.50, 12, Schedule.GENERAL, "Cipla", "30049063", 800),
    ("Azithral 500", "AZ5510", "2026-08-31", 119.50, 12, Schedule.H, "Alembic", "30042019", 150),
    ("Augmentin 625 Duo", "AG0921", "2026-12-31", 223.40, 12, Schedule.H, "GSK", "30041090", 120),
    ("Alprazolam 0.5mg", "AL7714", "2027-05-31", 42.00, 12, Schedule.H1, "Intas", "30049099", 60),
    ("Zolfresh 10", "ZF3302", "2026-10-31", 96.00, 12, Schedule.H1, "Abbott", "30049099", 40),
    ("Levocetirizine 5mg", "LV8820", "2028-02-29", 56.00, 12, Schedule.GENERAL, "Dr. Reddy's", "30049099", 300),
    ("Pantoprazole 40", "PN4410", "2027-07-31", 155.00, 12, Schedule.H, "Sun Pharma", "30049099", 250),
    ("Morphine Sulphate 10mg", "MS0101", "2027-03-31", 210.00, 12, Schedule.X, "Rusan", "30024100", 10),
]

CUSTOMERS = [
    CustomerCreate(name=f"Wholesale Partner {i}", type=CustomerType.WHOLESALE,
                   gstin=f"27ABCDE{1000 + i}F1Z5", mobile=f"98765{43210 + i}", state_code="27")
    for i in range(1, 6)
] + [
    CustomerCreate(name=f"Retail Customer {i}", type=CustomerType.RETAIL,
                   mobile=f"91234{56780 + i}", state_code="27")
    for i in range(1, 6)
]


def seed_catalog():
    init_db()
    db = SessionLocal()
    try:
        if db.query(Product).count() == 0:
            for name, batch, expiry, mrp, gst, schedule, maker, hsn, stock in PRODUCTS:
                create_product(db, ProductCreate(
                    name=name, batch=batch, expiry=expiry, mrp=Decimal(str(mrp)),
                    gst_percent=Decimal(gst), schedule=schedule, manufacturer=maker,
                    hsn=hsn, stock=stock,
                ))
            print(f"✅ Seeded {len(PRODUCTS)} products")
        else:
            print("Products already present, skipping")

        if db.query(Customer).count() == 0:
            save_customers(db, CUSTOMERS)
            print(f"✅ Seeded {len(CUSTOMERS)} customers")
        else:
            print("Customers already present, skipping")
    finally:
        db.close()


if __name__ == "__main__":
    seed_catalog()
