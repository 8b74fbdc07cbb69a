from sqlalchemy import Column, Integer, String, Numeric
from pharmabill.db.base import Base


class Product(Base):
    """
    Pharmacy catalog row (one batch of one medicine).

    COMPLIANCE NOTE:
    - schedule: General, H, H1 or X. Only H1 gates checkout behind
      doctor/patient details.
    - expiry is kept as the ISO text the distributor supplied (YYYY-MM-DD);
      FEFO ranking parses it and sorts unparsable values last.
    """
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    batch = Column(String(64), nullable=False, default="")
    expiry = Column(String(32), nullable=True, index=True)
    mrp = Column(Numeric(10, 2), nullable=False, default=0)
    rate = Column(Numeric(10, 2), nullable=False, default=0)  # Billing rate, usually PTR
    ptr = Column(Numeric(10, 2), nullable=False, default=0)
    pts = Column(Numeric(10, 2), nullable=False, default=0)
    stock = Column(Integer, nullable=False, default=0)
    manufacturer = Column(String(255), nullable=False, default="")
    hsn = Column(String(16), nullable=False, default="")
    gst_percent = Column(Numeric(5, 2), nullable=False, default=12)
    schedule = Column(String(16), nullable=False, default="General", index=True)
