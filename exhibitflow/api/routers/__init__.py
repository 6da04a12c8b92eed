"""API routers for ExhibitFlow."""

from . import products
from . import exhibitions
from . import approvals
from . import orders
from . import product_lists
from . import me

__all__ = [
    "products",
    "exhibitions",
    "approvals",
    "orders",
    "product_lists",
    "me",
]
