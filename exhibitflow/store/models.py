"""Entity records held by the workflow store.

Plain dataclasses; the store owns the only live copies and hands out deep
copies on every read.
"""

from dataclasses import dataclass, field, fields
from datetime import date, datetime, timezone
from enum import Enum
from typing import List, Optional

from exhibitflow.core.approval.states import ExhibitionProductStatus
from exhibitflow.core.rbac.roles import Role


class Availability(str, Enum):
    IN_STOCK = "In-stock"
    OUT_OF_STOCK = "Out of stock"
    LOW_STOCK = "Low stock"


class ExhibitionStatus(str, Enum):
    PLANNING = "PLANNING"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"


class OrderStatus(str, Enum):
    """Order lifecycle.

    DRAFT, CONFIRMED and SHIPPED are the workflow states. The remaining
    values are delivery statuses carried by imported legacy orders.
    """

    DRAFT = "DRAFT"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"

    DELAYED = "Delayed"
    RECEIVED = "Received"
    RETURNED = "Returned"
    OUT_FOR_DELIVERY = "Out for delivery"
    WAITING_FOR_CHECK = "Waiting for check"


class ProductListStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


PLACEHOLDER_IMAGE = "/placeholder.png"


@dataclass
class Actor:
    id: str
    username: str
    role: Role
    full_name: str = ""


@dataclass
class Product:
    id: str
    name: str
    category: str = ""
    buying_price: float = 0.0
    quantity: int = 0
    unit: str = ""
    threshold_value: int = 0
    expiry_date: Optional[date] = None
    availability: Availability = Availability.IN_STOCK
    image: Optional[str] = PLACEHOLDER_IMAGE
    sku: Optional[str] = None
    description: Optional[str] = None
    # Global approval flag, independent of per-exhibition approval
    approved: bool = False


@dataclass
class Exhibition:
    # ``id`` identifies the record for reads and updates; ``exhibition_code``
    # is the key every other table joins on.
    id: str
    exhibition_code: str
    name: str
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: ExhibitionStatus = ExhibitionStatus.PLANNING


@dataclass
class ExhibitionProduct:
    id: str
    exhibition_code: str
    product_id: str
    quantity: int
    supplier_id: str
    price: Optional[float] = None
    status: ExhibitionProductStatus = ExhibitionProductStatus.PENDING
    compliance_notes: Optional[str] = None


@dataclass
class OrderItem:
    product_id: str
    quantity: int


@dataclass
class Order:
    id: str
    exhibition_code: Optional[str] = None
    items: List[OrderItem] = field(default_factory=list)
    status: OrderStatus = OrderStatus.DRAFT
    created_at: Optional[datetime] = None
    # Legacy order details
    exhibition_name: Optional[str] = None
    order_value: Optional[float] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    expected_delivery: Optional[date] = None


@dataclass
class ProductList:
    id: str
    exhibition_code: str
    supplier_id: str
    status: ProductListStatus = ProductListStatus.PENDING
    created_at: Optional[datetime] = None
    total_quantity: int = 0


@dataclass
class ProductListItem:
    id: str
    product_list_id: str
    product_id: str
    quantity: int
    price: float = 0.0


def field_names(cls) -> frozenset:
    """Names of the dataclass fields of ``cls``."""
    return frozenset(f.name for f in fields(cls))
