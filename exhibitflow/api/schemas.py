"""Request and error schemas for the ExhibitFlow API."""

from datetime import date
from typing import List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str
    detail: Optional[str] = None
    details: Optional[dict] = None


class ProductCreate(BaseModel):
    id: Optional[str] = None
    name: str
    category: str = ""
    buying_price: float = 0
    quantity: int = 0
    unit: str = ""
    threshold_value: int = 0
    expiry_date: Optional[date] = None
    availability: Optional[str] = None
    image: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = None
    category: Optional[str] = None
    buying_price: Optional[float] = None
    quantity: Optional[int] = None
    unit: Optional[str] = None
    threshold_value: Optional[int] = None
    expiry_date: Optional[date] = None
    availability: Optional[str] = None
    image: Optional[str] = None
    sku: Optional[str] = None
    description: Optional[str] = None
    approved: Optional[bool] = None


class ExhibitionProductIn(BaseModel):
    product_id: str
    quantity: int = 0
    price: Optional[float] = None
    supplier_id: Optional[str] = None
    compliance_notes: Optional[str] = None


class ExhibitionCreate(BaseModel):
    name: str
    exhibition_code: Optional[str] = None
    description: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    products: List[ExhibitionProductIn] = []


class ExhibitionUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None


class ExhibitionProductsAdd(BaseModel):
    products: List[ExhibitionProductIn]


class ApprovalDecision(BaseModel):
    id: str
    status: str


class OrderItemIn(BaseModel):
    product_id: str
    quantity: int


class OrderCreate(BaseModel):
    exhibition_code: str
    items: List[OrderItemIn]


class OrderStatusUpdate(BaseModel):
    status: str


class ProductListItemIn(BaseModel):
    product_id: str
    quantity: int
    price: float = 0


class ProductListCreate(BaseModel):
    exhibition_code: str
    supplier_id: str
    items: List[ProductListItemIn]


class ProductListUpdate(BaseModel):
    status: Optional[str] = None
    items: Optional[List[ProductListItemIn]] = None


def dump_items(items) -> List[dict]:
    """Plain dicts for a list of item models, dropping unset optionals."""
    return [item.model_dump(exclude_none=True) for item in items]
