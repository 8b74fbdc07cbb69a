from pharmabill.models.product import Product
from pharmabill.models.customer import Customer
from pharmabill.models.invoice import Invoice

__all__ = ["Product", "Customer", "Invoice"]
