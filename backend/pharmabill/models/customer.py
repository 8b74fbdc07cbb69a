from sqlalchemy import Column, Integer, String, JSON
from pharmabill.db.base import Base


class Customer(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    type = Column(String(16), nullable=False, default="retail")  # wholesale | retail
    gstin = Column(String(32), nullable=True)
    state_code = Column(String(8), nullable=True)
    mobile = Column(String(64), nullable=False, default="")
    address = Column(String(512), nullable=True)
    search_index = Column(JSON, nullable=False, default=list)
