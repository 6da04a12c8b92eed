"""Seed data for the workflow store.

Handles the built-in demo data set and loading of YAML seed files.
A seed file mirrors ``DEFAULT_SEED``: a mapping of table name to a list of
records. Missing tables are treated as empty.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from exhibitflow.core.errors import ValidationFailed
from exhibitflow.core.rbac.roles import DEFAULT_ACTORS

from .fields import build
from .models import (
    Actor,
    Exhibition,
    ExhibitionProduct,
    Order,
    OrderItem,
    Product,
    ProductList,
    ProductListItem,
)


DEFAULT_SEED: Dict[str, List[Dict[str, Any]]] = {
    "actors": [dict(actor) for actor in DEFAULT_ACTORS],
    "products": [
        {
            "id": "456567", "name": "Maggi", "category": "Instant food",
            "buying_price": 430, "quantity": 43, "unit": "Packets",
            "threshold_value": 12, "expiry_date": "2022-12-11",
            "availability": "In-stock", "image": "/placeholder.png",
            "sku": "SKU-456567", "approved": True,
        },
        {
            "id": "456568", "name": "Bru", "category": "Instant food",
            "buying_price": 257, "quantity": 22, "unit": "Packets",
            "threshold_value": 12, "expiry_date": "2022-12-21",
            "availability": "Out of stock", "image": "/placeholder.png",
            "sku": "SKU-456568", "approved": False,
        },
        {
            "id": "456569", "name": "Red Bull", "category": "Energy Drink",
            "buying_price": 405, "quantity": 36, "unit": "Packets",
            "threshold_value": 9, "expiry_date": "2022-12-05",
            "availability": "In-stock", "image": "/placeholder.png",
            "sku": "SKU-456569", "approved": True,
        },
        {
            "id": "456570", "name": "Bourn Vita", "category": "Health Drink",
            "buying_price": 502, "quantity": 14, "unit": "Packets",
            "threshold_value": 6, "expiry_date": "2022-12-08",
            "availability": "Out of stock", "image": "/placeholder.png",
            "sku": "SKU-456570", "approved": False,
        },
        {
            "id": "456571", "name": "Horlicks", "category": "Health Drink",
            "buying_price": 530, "quantity": 5, "unit": "Packets",
            "threshold_value": 5, "expiry_date": "2023-01-09",
            "availability": "In-stock", "image": "/placeholder.png",
            "sku": "SKU-456571", "approved": True,
        },
    ],
    "exhibitions": [
        {
            "id": "oxurt5ywn", "exhibition_code": "EX-2941", "name": "test exibition",
            "description": "testtesttest", "start_date": "2025-12-02",
            "end_date": "2025-12-17", "status": "PLANNING",
        },
        {
            "id": "ui61d3cma", "exhibition_code": "EX-7516", "name": "test2",
            "description": "", "start_date": "2025-12-17",
            "end_date": "2025-12-17", "status": "PLANNING",
        },
        {
            "id": "fs13x086f", "exhibition_code": "EX-7460", "name": "AAAA",
            "description": "", "start_date": "2025-12-03",
            "end_date": "2025-12-06", "status": "ACTIVE",
        },
    ],
    "exhibition_products": [
        {"id": "d7gyiq52d", "exhibition_code": "EX-2941", "product_id": "456567",
         "quantity": 1, "status": "approved", "supplier_id": "current-user"},
        {"id": "cszttszpu", "exhibition_code": "EX-2941", "product_id": "456568",
         "quantity": 1, "status": "pending", "supplier_id": "current-user"},
        {"id": "is0w5qty1", "exhibition_code": "EX-2941", "product_id": "456570",
         "quantity": 1, "status": "pending", "supplier_id": "current-user"},
        {"id": "7cajr3r7o", "exhibition_code": "EX-2941", "product_id": "456571",
         "quantity": 1, "status": "pending", "supplier_id": "current-user"},
    ],
    "orders": [
        {"id": "7535", "exhibition_name": "Taste & Treat Festival", "order_value": 4306000,
         "quantity": 43, "unit": "Packets", "expected_delivery": "2022-12-11",
         "status": "Delayed"},
        {"id": "5724", "exhibition_name": "Flavors of the City", "order_value": 2557000,
         "quantity": 22, "unit": "Packets", "expected_delivery": "2022-12-21",
         "status": "Received"},
        {"id": "2775", "exhibition_name": "Street Bite Market", "order_value": 4075000,
         "quantity": 36, "unit": "Packets", "expected_delivery": "2022-12-05",
         "status": "Returned"},
    ],
    "product_lists": [
        {"id": "a1e8x088e", "exhibition_code": "EX-2941", "supplier_id": "current-user",
         "status": "pending", "created_at": "2025-12-03T03:05:05.799Z", "total_quantity": 12},
        {"id": "r2is3icfx", "exhibition_code": "EX-7460", "supplier_id": "current-user",
         "status": "pending", "created_at": "2025-12-03T03:06:14.423Z", "total_quantity": 3},
    ],
    "product_list_items": [
        {"id": "15ukio6ll", "product_list_id": "a1e8x088e", "product_id": "456567",
         "quantity": 11, "price": 430},
        {"id": "y9leq73fw", "product_list_id": "a1e8x088e", "product_id": "456568",
         "quantity": 1, "price": 257},
        {"id": "j2n0iuw1l", "product_list_id": "r2is3icfx", "product_id": "456567",
         "quantity": 1, "price": 430},
        {"id": "r4zoefv9a", "product_list_id": "r2is3icfx", "product_id": "456568",
         "quantity": 1, "price": 257},
        {"id": "i66klbiam", "product_list_id": "r2is3icfx", "product_id": "456569",
         "quantity": 1, "price": 405},
    ],
}


@dataclass
class SeedData:
    """Typed seed records, one list per table."""

    actors: List[Actor] = field(default_factory=list)
    products: List[Product] = field(default_factory=list)
    exhibitions: List[Exhibition] = field(default_factory=list)
    exhibition_products: List[ExhibitionProduct] = field(default_factory=list)
    orders: List[Order] = field(default_factory=list)
    product_lists: List[ProductList] = field(default_factory=list)
    product_list_items: List[ProductListItem] = field(default_factory=list)


_TABLES = {
    "actors": Actor,
    "products": Product,
    "exhibitions": Exhibition,
    "exhibition_products": ExhibitionProduct,
    "product_lists": ProductList,
    "product_list_items": ProductListItem,
}


def parse_order(order_dict: Dict[str, Any]) -> Order:
    """Parse an order record, including its item list.

    Args:
        order_dict: Order record

    Returns:
        Order instance
    """
    data = dict(order_dict)
    raw_items = data.pop("items", None) or []
    items = [build(OrderItem, item) for item in raw_items]
    order = build(Order, data)
    order.items = items
    return order


def parse_seed(seed_dict: Dict[str, Any]) -> SeedData:
    """Parse a seed dictionary into typed records.

    Args:
        seed_dict: Mapping of table name to list of records

    Returns:
        SeedData instance

    Raises:
        ValidationFailed: On unknown tables or malformed records
    """
    unknown = sorted(set(seed_dict) - set(_TABLES) - {"orders"})
    if unknown:
        raise ValidationFailed(
            f"Unknown seed tables: {', '.join(unknown)}", details={"tables": unknown}
        )

    seed = SeedData()
    for table, cls in _TABLES.items():
        records = seed_dict.get(table) or []
        setattr(seed, table, [build(cls, record) for record in records])
    seed.orders = [parse_order(record) for record in seed_dict.get("orders") or []]
    return seed


def default_seed() -> SeedData:
    """The built-in demo data set."""
    return parse_seed(DEFAULT_SEED)


def load_seed(seed_path: str) -> SeedData:
    """Load seed data from a YAML file.

    Args:
        seed_path: Path to the seed file

    Returns:
        SeedData instance

    Raises:
        FileNotFoundError: If the seed file doesn't exist
        yaml.YAMLError: If the seed file is invalid YAML
        TypeError: If the document root is not a mapping
    """
    seed_file = Path(seed_path)

    if not seed_file.exists():
        raise FileNotFoundError(f"Seed file not found: {seed_path}")

    with seed_file.open("r") as f:
        raw = yaml.safe_load(f)

    if raw is None:
        raw = {}

    if not isinstance(raw, dict):
        raise TypeError(
            f"Seed root must be a mapping, got {type(raw).__name__}"
        )

    return parse_seed(_expand_env_vars(raw))


def _expand_env_vars(obj: Any) -> Any:
    """Recursively expand environment variables in string values."""
    if isinstance(obj, dict):
        return {key: _expand_env_vars(value) for key, value in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(item) for item in obj]
    elif isinstance(obj, str):
        return os.path.expandvars(obj)
    else:
        return obj
