"""Workflow service: the operations the request layer calls.

Every method takes the resolved actor first, checks the operation's
capability, delegates to the store, and returns plain dictionaries
(enum values and ISO 8601 dates) ready for serialization.
"""

from dataclasses import asdict, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional

from exhibitflow.common.logger import get_logger
from exhibitflow.core.errors import NotFound, Unauthenticated
from exhibitflow.core.rbac import Capability, authorize
from exhibitflow.core.rbac.permissions import get_role_capabilities
from exhibitflow.core.rbac.roles import ROLE_DESCRIPTIONS, Role
from exhibitflow.store.models import Actor
from exhibitflow.store.workflow import WorkflowStore

logger = get_logger(__name__)


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_plain(v) for v in value]
    return value


def to_dict(record) -> Optional[Dict[str, Any]]:
    """Convert a store record to a JSON-friendly dictionary."""
    if record is None:
        return None
    if not is_dataclass(record):
        raise TypeError(f"Expected a dataclass record, got {type(record).__name__}")
    return _plain(asdict(record))


class WorkflowService:
    """
    High-level API over the workflow store.

    Handles:
    - Actor resolution
    - Capability checks for reads and writes
    - Enriching rows with product and exhibition details
    - Order overviews built from approved product lists
    """

    def __init__(self, store: WorkflowStore):
        self.store = store

    # ------------------------------------------------------------------
    # Identity
    # ------------------------------------------------------------------

    def resolve_actor(self, actor_id: Optional[str]) -> Actor:
        """
        Resolve an actor id into an Actor.

        Raises:
            Unauthenticated: If the id is empty or unknown
        """
        if not actor_id:
            raise Unauthenticated()
        actor = self.store.get_actor(actor_id)
        if actor is None:
            logger.warning("Unknown actor id %r", actor_id)
            raise Unauthenticated(f"Unknown actor: {actor_id}")
        return actor

    def describe_actor(self, actor: Optional[Actor]) -> Dict[str, Any]:
        """The acting user with their role description and capabilities."""
        if actor is None:
            raise Unauthenticated()
        role = Role(actor.role)
        data = to_dict(actor)
        data["role_description"] = ROLE_DESCRIPTIONS[role]
        data["capabilities"] = get_role_capabilities(role)
        return data

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self, actor: Optional[Actor]) -> List[Dict[str, Any]]:
        authorize(actor, Capability.PRODUCT_READ)
        return [to_dict(p) for p in self.store.list_products()]

    def get_product(self, actor: Optional[Actor], product_id: str) -> Dict[str, Any]:
        authorize(actor, Capability.PRODUCT_READ)
        product = self.store.get_product(product_id)
        if product is None:
            raise NotFound("Product", product_id)
        return to_dict(product)

    def create_product(self, actor: Optional[Actor], fields: Mapping[str, Any]) -> Dict[str, Any]:
        grant = authorize(actor, Capability.PRODUCT_CREATE)
        return to_dict(self.store.create_product(grant, fields))

    def update_product(
        self, actor: Optional[Actor], product_id: str, partial: Mapping[str, Any]
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.PRODUCT_UPDATE)
        product = self.store.update_product(grant, product_id, partial)
        if product is None:
            raise NotFound("Product", product_id)
        return to_dict(product)

    def delete_product(self, actor: Optional[Actor], product_id: str) -> None:
        grant = authorize(actor, Capability.PRODUCT_DELETE)
        if not self.store.delete_product(grant, product_id):
            raise NotFound("Product", product_id)

    # ------------------------------------------------------------------
    # Exhibitions
    # ------------------------------------------------------------------

    def list_exhibitions(self, actor: Optional[Actor]) -> List[Dict[str, Any]]:
        authorize(actor, Capability.EXHIBITION_READ)
        return [to_dict(e) for e in self.store.list_exhibitions()]

    def get_exhibition(self, actor: Optional[Actor], id_or_code: str) -> Dict[str, Any]:
        authorize(actor, Capability.EXHIBITION_READ)
        exhibition = self.store.get_exhibition(id_or_code)
        if exhibition is None:
            raise NotFound("Exhibition", id_or_code)
        return to_dict(exhibition)

    def create_exhibition(
        self,
        actor: Optional[Actor],
        fields: Mapping[str, Any],
        initial_products: Iterable[Mapping[str, Any]] = (),
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.EXHIBITION_CREATE)
        return to_dict(self.store.create_exhibition(grant, fields, initial_products))

    def update_exhibition(
        self, actor: Optional[Actor], exhibition_id: str, partial: Mapping[str, Any]
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.EXHIBITION_UPDATE)
        exhibition = self.store.update_exhibition(grant, exhibition_id, partial)
        if exhibition is None:
            raise NotFound("Exhibition", exhibition_id)
        return to_dict(exhibition)

    # ------------------------------------------------------------------
    # Exhibition products and approvals
    # ------------------------------------------------------------------

    def list_exhibition_products(self, actor: Optional[Actor], exhibition_code: str) -> List[Dict[str, Any]]:
        """Rows of one exhibition, with product name, unit and image."""
        authorize(actor, Capability.EXHIBITION_READ)
        return [
            self._with_product(to_dict(row), row.product_id)
            for row in self.store.list_exhibition_products(exhibition_code)
        ]

    def add_exhibition_products(
        self, actor: Optional[Actor], exhibition_code: str, items: Iterable[Mapping[str, Any]]
    ) -> List[Dict[str, Any]]:
        grant = authorize(actor, Capability.EXHIBITION_CREATE)
        return [to_dict(row) for row in self.store.add_exhibition_products(grant, exhibition_code, items)]

    def list_pending_approvals(self, actor: Optional[Actor]) -> List[Dict[str, Any]]:
        """Pending rows across all exhibitions, with exhibition and product names."""
        authorize(actor, Capability.APPROVAL_READ)
        pending = []
        for row in self.store.list_pending_exhibition_products():
            exhibition = self.store.get_exhibition_by_code(row.exhibition_code)
            product = self.store.get_product(row.product_id)
            data = to_dict(row)
            data["exhibition_name"] = exhibition.name if exhibition else None
            data["product_name"] = product.name if product else None
            data["product_image"] = product.image if product else None
            pending.append(data)
        return pending

    def set_approval(self, actor: Optional[Actor], row_id: str, status: Any) -> Dict[str, Any]:
        grant = authorize(actor, Capability.APPROVAL_APPROVE)
        return to_dict(self.store.set_exhibition_product_status(grant, row_id, status))

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def list_orders(self, actor: Optional[Actor]) -> List[Dict[str, Any]]:
        authorize(actor, Capability.ORDER_READ)
        return [to_dict(o) for o in self.store.list_orders()]

    def get_order(self, actor: Optional[Actor], order_id: str) -> Dict[str, Any]:
        authorize(actor, Capability.ORDER_READ)
        order = self.store.get_order(order_id)
        if order is None:
            raise NotFound("Order", order_id)
        return to_dict(order)

    def create_order(
        self, actor: Optional[Actor], exhibition_code: str, items: Iterable[Mapping[str, Any]]
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.ORDER_CREATE)
        return to_dict(self.store.create_order(grant, exhibition_code, items))

    def update_order_status(self, actor: Optional[Actor], order_id: str, status: Any) -> Dict[str, Any]:
        grant = authorize(actor, Capability.ORDER_UPDATE)
        order = self.store.update_order_status(grant, order_id, status)
        if order is None:
            raise NotFound("Order", order_id)
        return to_dict(order)

    def summarize_exhibition_orders(self, actor: Optional[Actor]) -> List[Dict[str, Any]]:
        """
        Per-exhibition order overview built from approved product lists.

        Returns:
            One entry per exhibition with its approved list items, the total
            value (price x quantity), total quantity, and ``Active`` status
            when at least one approved list exists, else ``Pending``.
        """
        authorize(actor, Capability.ORDER_READ)
        summaries = []
        for exhibition, lists in self.store.list_approved_product_lists_by_exhibition():
            total_value = 0.0
            total_quantity = 0
            items = []
            for product_list, list_items in lists:
                total_quantity += product_list.total_quantity
                for item in list_items:
                    total_value += (item.price or 0) * item.quantity
                    data = self._with_product(to_dict(item), item.product_id)
                    data["supplier_id"] = product_list.supplier_id
                    items.append(data)

            summary = to_dict(exhibition)
            summary.update({
                "orders": items,
                "total_value": total_value,
                "total_quantity": total_quantity,
                "status": "Active" if lists else "Pending",
            })
            summaries.append(summary)
        return summaries

    # ------------------------------------------------------------------
    # Product lists
    # ------------------------------------------------------------------

    def list_product_lists(
        self, actor: Optional[Actor], exhibition_code: Optional[str] = None
    ) -> List[Dict[str, Any]]:
        authorize(actor, Capability.ORDER_READ)
        return [to_dict(pl) for pl in self.store.list_product_lists(exhibition_code)]

    def create_product_list(
        self,
        actor: Optional[Actor],
        exhibition_code: str,
        supplier_id: str,
        items: Iterable[Mapping[str, Any]],
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.ORDER_CREATE)
        return to_dict(self.store.create_product_list(grant, exhibition_code, supplier_id, items))

    def get_product_list_with_items(self, actor: Optional[Actor], list_id: str) -> Dict[str, Any]:
        authorize(actor, Capability.ORDER_READ)
        found = self.store.get_product_list_with_items(list_id)
        if found is None:
            raise NotFound("Product list", list_id)
        product_list, items = found
        data = to_dict(product_list)
        data["items"] = [self._with_product(to_dict(item), item.product_id) for item in items]
        return data

    def update_product_list(
        self,
        actor: Optional[Actor],
        list_id: str,
        status: Any = None,
        items: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Dict[str, Any]:
        grant = authorize(actor, Capability.ORDER_UPDATE)
        product_list = self.store.update_product_list(grant, list_id, status=status, items=items)
        if product_list is None:
            raise NotFound("Product list", list_id)
        return to_dict(product_list)

    # ------------------------------------------------------------------

    def _with_product(self, data: Dict[str, Any], product_id: str) -> Dict[str, Any]:
        product = self.store.get_product(product_id)
        data["product_name"] = product.name if product else None
        data["product_unit"] = product.unit if product else None
        data["product_image"] = product.image if product else None
        return data
