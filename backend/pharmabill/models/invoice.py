from sqlalchemy import Column, Integer, String, ForeignKey, Numeric, DateTime, JSON
from sqlalchemy.orm import relationship
from pharmabill.db.base import Base


class Invoice(Base):
    """Finalized bill. Written once after a successful checkout, never updated."""
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    number = Column(String(64), nullable=False, unique=True, index=True)
    customer_id = Column(Integer, ForeignKey("customers.id", ondelete="SET NULL"), nullable=True)
    customer_name = Column(String(255), nullable=False, default="Cash Sale")
    items = Column(JSON, nullable=False)  # Snapshot of cart lines
    total_amount = Column(Numeric(12, 2), nullable=False)  # Taxable amount
    gst_rate = Column(Numeric(5, 4), nullable=False, default=0.12)  # Flat estimate
    gst_amount = Column(Numeric(12, 2), nullable=False)
    payable_amount = Column(Numeric(12, 2), nullable=False)
    doctor_details = Column(JSON, nullable=True)  # Present when any line is Schedule H1
    created_at = Column(DateTime(timezone=True), nullable=False)

    customer = relationship("Customer", backref="invoices")
