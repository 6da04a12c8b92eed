"""In-memory workflow store.

Owns every entity table and enforces the approval gate: an order is only
created when each of its products is approved for the order's exhibition.

Concurrency model: one re-entrant lock guards all tables. Every public
method holds it for its whole duration, so readers never see a multi-step
write (order creation, product list item replacement) half-applied.

Mutating methods take a ``CapabilityGrant`` issued by
``exhibitflow.core.rbac.authorize`` and re-verify it against the policy.
"""

import copy
import threading
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from exhibitflow.common.logger import get_logger
from exhibitflow.core.approval.states import (
    ExhibitionProductStatus,
    get_target_state,
    transition_for_status,
)
from exhibitflow.core.errors import (
    Conflict,
    NotFound,
    UnapprovedProductError,
    ValidationFailed,
)
from exhibitflow.core.ids import IdGenerator
from exhibitflow.core.rbac.checker import CapabilityGrant, verify_grant
from exhibitflow.core.rbac.permissions import Capability

from .fields import convert, merge
from .models import (
    Actor,
    Exhibition,
    ExhibitionProduct,
    Order,
    OrderItem,
    OrderStatus,
    Product,
    ProductList,
    ProductListItem,
    ProductListStatus,
    utcnow,
)
from .seed import SeedData

logger = get_logger(__name__)


def _snapshot(obj):
    return copy.deepcopy(obj)


def _require_text(value: Any, name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationFailed(f"{name} is required", details={"field": name})
    return str(value)


def _require_items(items: Any, name: str = "items") -> List[Mapping[str, Any]]:
    if items is None or isinstance(items, (str, bytes, Mapping)):
        raise ValidationFailed(f"{name} must be a list", details={"field": name})
    try:
        return list(items)
    except TypeError as e:
        raise ValidationFailed(f"{name} must be a list", details={"field": name}) from e


def _validate_product(product: Product) -> None:
    _require_text(product.name, "name")
    if product.buying_price < 0:
        raise ValidationFailed("buying_price must not be negative", details={"field": "buying_price"})
    if product.quantity < 0:
        raise ValidationFailed("quantity must not be negative", details={"field": "quantity"})
    if product.threshold_value < 0:
        raise ValidationFailed("threshold_value must not be negative", details={"field": "threshold_value"})


def _validate_exhibition(exhibition: Exhibition) -> None:
    _require_text(exhibition.name, "name")
    if exhibition.start_date and exhibition.end_date and exhibition.end_date < exhibition.start_date:
        raise ValidationFailed(
            "end_date must not be before start_date",
            details={"start_date": exhibition.start_date.isoformat(),
                     "end_date": exhibition.end_date.isoformat()},
        )


def _check_quantity(quantity: int, *, minimum: int) -> None:
    if quantity < minimum:
        raise ValidationFailed(
            f"quantity must be at least {minimum}", details={"field": "quantity", "value": quantity}
        )


class WorkflowStore:
    """
    Memory-resident entity tables for the exhibition workflow.

    Construct one per process (or per test) and pass it to whoever needs
    it. Tables are insertion-ordered dicts keyed by id.
    """

    def __init__(self, seed: Optional[SeedData] = None, *, id_generator: Optional[IdGenerator] = None):
        """
        Initialize the store.

        Args:
            seed: Records to preload; copied, never shared
            id_generator: Id allocator; a fresh one by default
        """
        self._lock = threading.RLock()
        self._ids = id_generator or IdGenerator()

        self._actors: Dict[str, Actor] = {}
        self._products: Dict[str, Product] = {}
        self._exhibitions: Dict[str, Exhibition] = {}
        self._exhibition_products: Dict[str, ExhibitionProduct] = {}
        self._orders: Dict[str, Order] = {}
        self._product_lists: Dict[str, ProductList] = {}
        self._product_list_items: Dict[str, ProductListItem] = {}

        if seed is not None:
            self._load(seed)

    def _load(self, seed: SeedData) -> None:
        seed = _snapshot(seed)
        tables = [
            (self._actors, seed.actors),
            (self._products, seed.products),
            (self._exhibitions, seed.exhibitions),
            (self._orders, seed.orders),
            (self._product_lists, seed.product_lists),
            (self._product_list_items, seed.product_list_items),
        ]
        for table, records in tables:
            for record in records:
                if record.id in table:
                    raise Conflict(f"Duplicate seed id {record.id}", details={"id": record.id})
                table[record.id] = record

        for product_list in self._product_lists.values():
            total = sum(item.quantity for item in self._items_of(product_list.id))
            if product_list.total_quantity != total:
                logger.warning(
                    "Seeded product list %s claims total %d, items sum to %d; using %d",
                    product_list.id, product_list.total_quantity, total, total,
                )
                product_list.total_quantity = total

        codes = {e.exhibition_code for e in self._exhibitions.values()}
        if len(codes) != len(self._exhibitions):
            raise Conflict("Duplicate exhibition codes in seed")

        for row in seed.exhibition_products:
            if row.id in self._exhibition_products:
                raise Conflict(f"Duplicate seed id {row.id}", details={"id": row.id})
            if self._find_exhibition_product(row.exhibition_code, row.product_id):
                raise Conflict(
                    f"Product {row.product_id} listed twice on {row.exhibition_code}",
                    details={"exhibition_code": row.exhibition_code, "product_id": row.product_id},
                )
            self._exhibition_products[row.id] = row

        logger.info(
            "Loaded seed: %d products, %d exhibitions, %d exhibition products, %d orders, %d product lists",
            len(self._products), len(self._exhibitions), len(self._exhibition_products),
            len(self._orders), len(self._product_lists),
        )

    # ------------------------------------------------------------------
    # Actors
    # ------------------------------------------------------------------

    def list_actors(self) -> List[Actor]:
        with self._lock:
            return _snapshot(list(self._actors.values()))

    def get_actor(self, actor_id: str) -> Optional[Actor]:
        with self._lock:
            return _snapshot(self._actors.get(actor_id))

    # ------------------------------------------------------------------
    # Products
    # ------------------------------------------------------------------

    def list_products(self) -> List[Product]:
        with self._lock:
            return _snapshot(list(self._products.values()))

    def get_product(self, product_id: str) -> Optional[Product]:
        with self._lock:
            return _snapshot(self._products.get(product_id))

    def create_product(self, grant: CapabilityGrant, fields: Mapping[str, Any]) -> Product:
        """
        Register a new product.

        A caller-supplied ``id`` is honoured if free. ``approved`` always
        starts out False.

        Raises:
            ValidationFailed: On malformed fields
            Conflict: If the supplied id is taken
        """
        verify_grant(grant, Capability.PRODUCT_CREATE)
        data = convert(Product, fields)
        data.pop("approved", None)

        with self._lock:
            product_id = data.pop("id", None)
            if product_id is not None:
                if product_id in self._products:
                    raise Conflict(f"Product {product_id} already exists", details={"id": product_id})
            else:
                product_id = self._ids.next_id("products", self._products)

            data.setdefault("sku", f"SKU-{product_id}")
            if "name" not in data:
                raise ValidationFailed("name is required", details={"field": "name"})
            product = Product(id=product_id, approved=False, **data)
            _validate_product(product)

            self._products[product_id] = product
            logger.info("Product %s (%s) created by %s", product_id, product.name, grant.actor_id)
            return _snapshot(product)

    def update_product(
        self, grant: CapabilityGrant, product_id: str, partial: Mapping[str, Any]
    ) -> Optional[Product]:
        """Merge ``partial`` into a product. Returns None if it does not exist."""
        verify_grant(grant, Capability.PRODUCT_UPDATE)
        with self._lock:
            current = self._products.get(product_id)
            if current is None:
                return None
            updated = merge(current, partial)
            _validate_product(updated)
            self._products[product_id] = updated
            logger.info("Product %s updated by %s", product_id, grant.actor_id)
            return _snapshot(updated)

    def delete_product(self, grant: CapabilityGrant, product_id: str) -> bool:
        """Remove a product. Returns whether a row was removed."""
        verify_grant(grant, Capability.PRODUCT_DELETE)
        with self._lock:
            removed = self._products.pop(product_id, None) is not None
        if removed:
            logger.info("Product %s deleted by %s", product_id, grant.actor_id)
        return removed

    # ------------------------------------------------------------------
    # Exhibitions
    # ------------------------------------------------------------------

    def list_exhibitions(self) -> List[Exhibition]:
        with self._lock:
            return _snapshot(list(self._exhibitions.values()))

    def get_exhibition(self, id_or_code: str) -> Optional[Exhibition]:
        """Look up an exhibition by internal id, falling back to its code."""
        with self._lock:
            exhibition = self._exhibitions.get(id_or_code) or self._exhibition_by_code(id_or_code)
            return _snapshot(exhibition)

    def get_exhibition_by_code(self, exhibition_code: str) -> Optional[Exhibition]:
        with self._lock:
            return _snapshot(self._exhibition_by_code(exhibition_code))

    def _exhibition_by_code(self, exhibition_code: str) -> Optional[Exhibition]:
        for exhibition in self._exhibitions.values():
            if exhibition.exhibition_code == exhibition_code:
                return exhibition
        return None

    def create_exhibition(
        self,
        grant: CapabilityGrant,
        fields: Mapping[str, Any],
        initial_products: Iterable[Mapping[str, Any]] = (),
    ) -> Exhibition:
        """
        Create an exhibition and list its initial products as pending.

        The exhibition and all of its product rows are validated before
        anything is inserted.

        Raises:
            ValidationFailed: On malformed fields or items
            NotFound: If an initial product does not exist
            Conflict: If the supplied code is taken or a product repeats
        """
        verify_grant(grant, Capability.EXHIBITION_CREATE)
        data = convert(Exhibition, fields, allowed=(
            "exhibition_code", "name", "description", "start_date", "end_date", "status",
        ))
        items = _require_items(initial_products, "initial_products")

        with self._lock:
            codes = {e.exhibition_code for e in self._exhibitions.values()}
            code = data.pop("exhibition_code", None)
            if code is not None:
                if code in codes:
                    raise Conflict(f"Exhibition code {code} already exists", details={"exhibition_code": code})
            else:
                code = self._ids.next_id("exhibition_codes", codes)

            if "name" not in data:
                raise ValidationFailed("name is required", details={"field": "name"})
            exhibition = Exhibition(
                id=self._ids.next_id("exhibitions", self._exhibitions),
                exhibition_code=code,
                **data,
            )
            _validate_exhibition(exhibition)
            rows = self._prepare_exhibition_products(code, items, grant.actor_id)

            self._exhibitions[exhibition.id] = exhibition
            self._insert_exhibition_products(rows)
            logger.info(
                "Exhibition %s (%s) created by %s with %d products",
                code, exhibition.id, grant.actor_id, len(rows),
            )
            return _snapshot(exhibition)

    def update_exhibition(
        self, grant: CapabilityGrant, exhibition_id: str, partial: Mapping[str, Any]
    ) -> Optional[Exhibition]:
        """Merge ``partial`` into an exhibition. The code cannot change."""
        verify_grant(grant, Capability.EXHIBITION_UPDATE)
        with self._lock:
            current = self._exhibitions.get(exhibition_id)
            if current is None:
                return None
            updated = merge(current, partial, read_only=("id", "exhibition_code"))
            _validate_exhibition(updated)
            self._exhibitions[exhibition_id] = updated
            logger.info("Exhibition %s updated by %s", exhibition_id, grant.actor_id)
            return _snapshot(updated)

    # ------------------------------------------------------------------
    # Exhibition products (per-exhibition approval records)
    # ------------------------------------------------------------------

    def list_exhibition_products(self, exhibition_code: Optional[str] = None) -> List[ExhibitionProduct]:
        with self._lock:
            return _snapshot([
                row for row in self._exhibition_products.values()
                if exhibition_code is None or row.exhibition_code == exhibition_code
            ])

    def get_exhibition_product(self, row_id: str) -> Optional[ExhibitionProduct]:
        with self._lock:
            return _snapshot(self._exhibition_products.get(row_id))

    def list_pending_exhibition_products(self) -> List[ExhibitionProduct]:
        with self._lock:
            return _snapshot([
                row for row in self._exhibition_products.values()
                if row.status == ExhibitionProductStatus.PENDING
            ])

    def list_approved_exhibition_products(self, exhibition_code: str) -> List[ExhibitionProduct]:
        with self._lock:
            return _snapshot([
                row for row in self._exhibition_products.values()
                if row.exhibition_code == exhibition_code
                and row.status == ExhibitionProductStatus.APPROVED
            ])

    def is_approved(self, exhibition_code: str, product_id: str) -> bool:
        """True only if a row for the pair exists and is approved."""
        with self._lock:
            row = self._find_exhibition_product(exhibition_code, product_id)
            return row is not None and row.status == ExhibitionProductStatus.APPROVED

    def add_exhibition_products(
        self, grant: CapabilityGrant, exhibition_code: str, items: Iterable[Mapping[str, Any]]
    ) -> List[ExhibitionProduct]:
        """
        List products on an existing exhibition, each starting as pending.

        Raises:
            NotFound: If the exhibition or a product does not exist
            Conflict: If a product is already listed on the exhibition
            ValidationFailed: On malformed items
        """
        verify_grant(grant, Capability.EXHIBITION_CREATE)
        items = _require_items(items)
        with self._lock:
            if self._exhibition_by_code(exhibition_code) is None:
                raise NotFound("Exhibition", exhibition_code)
            rows = self._prepare_exhibition_products(exhibition_code, items, grant.actor_id)
            self._insert_exhibition_products(rows)
            logger.info(
                "%d products added to exhibition %s by %s", len(rows), exhibition_code, grant.actor_id
            )
            return _snapshot(rows)

    def set_exhibition_product_status(
        self, grant: CapabilityGrant, row_id: str, status: Any
    ) -> ExhibitionProduct:
        """
        Approve or reject a product on an exhibition.

        Raises:
            ValidationFailed: If ``status`` is not approved/rejected
            NotFound: If the row does not exist
        """
        verify_grant(grant, Capability.APPROVAL_APPROVE)
        transition = transition_for_status(status)
        with self._lock:
            row = self._exhibition_products.get(row_id)
            if row is None:
                raise NotFound("Exhibition product", row_id)
            previous = row.status
            row.status = get_target_state(previous, transition)
            logger.info(
                "Exhibition product %s (%s on %s): %s -> %s by %s",
                row_id, row.product_id, row.exhibition_code,
                previous.value, row.status.value, grant.actor_id,
            )
            return _snapshot(row)

    def _find_exhibition_product(self, exhibition_code: str, product_id: str) -> Optional[ExhibitionProduct]:
        for row in self._exhibition_products.values():
            if row.exhibition_code == exhibition_code and row.product_id == product_id:
                return row
        return None

    def _prepare_exhibition_products(
        self, exhibition_code: str, items: List[Mapping[str, Any]], supplier_id: str
    ) -> List[ExhibitionProduct]:
        """Validate a batch of rows without inserting anything."""
        rows: List[ExhibitionProduct] = []
        seen = set()
        taken = set(self._exhibition_products)
        for item in items:
            data = convert(ExhibitionProduct, item, allowed=(
                "product_id", "quantity", "price", "supplier_id", "compliance_notes",
            ))
            product_id = _require_text(data.pop("product_id", None), "product_id")
            if product_id not in self._products:
                raise NotFound("Product", product_id)
            if product_id in seen or self._find_exhibition_product(exhibition_code, product_id):
                raise Conflict(
                    f"Product {product_id} is already listed on exhibition {exhibition_code}",
                    details={"exhibition_code": exhibition_code, "product_id": product_id},
                )
            seen.add(product_id)

            quantity = data.pop("quantity", 0)
            _check_quantity(quantity, minimum=0)
            row_id = self._ids.next_id("exhibition_products", taken)
            taken.add(row_id)
            rows.append(ExhibitionProduct(
                id=row_id,
                exhibition_code=exhibition_code,
                product_id=product_id,
                quantity=quantity,
                supplier_id=data.pop("supplier_id", None) or supplier_id,
                status=ExhibitionProductStatus.PENDING,
                **data,
            ))
        return rows

    def _insert_exhibition_products(self, rows: List[ExhibitionProduct]) -> None:
        for row in rows:
            self._exhibition_products[row.id] = row

    # ------------------------------------------------------------------
    # Orders
    # ------------------------------------------------------------------

    def list_orders(self) -> List[Order]:
        with self._lock:
            return _snapshot(list(self._orders.values()))

    def get_order(self, order_id: str) -> Optional[Order]:
        with self._lock:
            return _snapshot(self._orders.get(order_id))

    def create_order(
        self, grant: CapabilityGrant, exhibition_code: str, items: Iterable[Mapping[str, Any]]
    ) -> Order:
        """
        Create a DRAFT order if every item is approved for the exhibition.

        All items are checked before the order is inserted; the first
        unapproved item aborts the whole call.

        Raises:
            ValidationFailed: On malformed items or an empty order
            UnapprovedProductError: If any item is not approved
        """
        verify_grant(grant, Capability.ORDER_CREATE)
        exhibition_code = _require_text(exhibition_code, "exhibition_code")
        order_items = [self._order_item(item) for item in _require_items(items)]
        if not order_items:
            raise ValidationFailed("An order needs at least one item", details={"field": "items"})

        with self._lock:
            for item in order_items:
                if not self.is_approved(exhibition_code, item.product_id):
                    product = self._products.get(item.product_id)
                    product_name = product.name if product else None
                    logger.warning(
                        "Order on %s by %s rejected: product %s not approved",
                        exhibition_code, grant.actor_id, item.product_id,
                    )
                    raise UnapprovedProductError(exhibition_code, item.product_id, product_name)

            order = Order(
                id=self._ids.next_id("orders", self._orders),
                exhibition_code=exhibition_code,
                items=order_items,
                status=OrderStatus.DRAFT,
                created_at=utcnow(),
            )
            self._orders[order.id] = order
            logger.info(
                "Order %s created on %s by %s with %d items",
                order.id, exhibition_code, grant.actor_id, len(order_items),
            )
            return _snapshot(order)

    def update_order_status(self, grant: CapabilityGrant, order_id: str, status: Any) -> Optional[Order]:
        """Set an order's status. Returns None if the order does not exist."""
        verify_grant(grant, Capability.ORDER_UPDATE)
        new_status = convert(Order, {"status": status})["status"]
        with self._lock:
            order = self._orders.get(order_id)
            if order is None:
                return None
            order.status = new_status
            logger.info("Order %s set to %s by %s", order_id, new_status.value, grant.actor_id)
            return _snapshot(order)

    @staticmethod
    def _order_item(item: Mapping[str, Any]) -> OrderItem:
        data = convert(OrderItem, item)
        product_id = _require_text(data.get("product_id"), "product_id")
        if "quantity" not in data:
            raise ValidationFailed("quantity is required", details={"field": "quantity"})
        _check_quantity(data["quantity"], minimum=1)
        return OrderItem(product_id=product_id, quantity=data["quantity"])

    # ------------------------------------------------------------------
    # Product lists
    # ------------------------------------------------------------------

    def list_product_lists(self, exhibition_code: Optional[str] = None) -> List[ProductList]:
        with self._lock:
            return _snapshot([
                pl for pl in self._product_lists.values()
                if exhibition_code is None or pl.exhibition_code == exhibition_code
            ])

    def get_product_list(self, list_id: str) -> Optional[ProductList]:
        with self._lock:
            return _snapshot(self._product_lists.get(list_id))

    def list_product_list_items(self, list_id: str) -> List[ProductListItem]:
        with self._lock:
            return _snapshot(self._items_of(list_id))

    def get_product_list_with_items(
        self, list_id: str
    ) -> Optional[Tuple[ProductList, List[ProductListItem]]]:
        """A list and its items read together, or None if the list does not exist."""
        with self._lock:
            product_list = self._product_lists.get(list_id)
            if product_list is None:
                return None
            return _snapshot((product_list, self._items_of(list_id)))

    def list_approved_product_lists_by_exhibition(
        self,
    ) -> List[Tuple[Exhibition, List[Tuple[ProductList, List[ProductListItem]]]]]:
        """
        Every exhibition paired with its approved product lists and their items.

        Taken in one pass under the lock, so totals and items always agree.
        """
        with self._lock:
            overview = []
            for exhibition in self._exhibitions.values():
                lists = [
                    (pl, self._items_of(pl.id))
                    for pl in self._product_lists.values()
                    if pl.exhibition_code == exhibition.exhibition_code
                    and pl.status == ProductListStatus.APPROVED
                ]
                overview.append((exhibition, lists))
            return _snapshot(overview)

    def create_product_list(
        self,
        grant: CapabilityGrant,
        exhibition_code: str,
        supplier_id: str,
        items: Iterable[Mapping[str, Any]],
    ) -> ProductList:
        """
        Create a pending product list for a supplier on an exhibition.

        Product lists are quantity manifests; they are not approval gated.

        Raises:
            ValidationFailed: On missing code/supplier or malformed items
            NotFound: If the exhibition does not exist
        """
        verify_grant(grant, Capability.ORDER_CREATE)
        exhibition_code = _require_text(exhibition_code, "exhibition_code")
        supplier_id = _require_text(supplier_id, "supplier_id")
        items = _require_items(items)

        with self._lock:
            if self._exhibition_by_code(exhibition_code) is None:
                raise NotFound("Exhibition", exhibition_code)
            product_list = ProductList(
                id=self._ids.next_id("product_lists", self._product_lists),
                exhibition_code=exhibition_code,
                supplier_id=supplier_id,
                status=ProductListStatus.PENDING,
                created_at=utcnow(),
            )
            new_items = self._prepare_list_items(product_list.id, items)
            self._product_lists[product_list.id] = product_list
            self._store_items(product_list, new_items)
            logger.info(
                "Product list %s created on %s for supplier %s by %s",
                product_list.id, exhibition_code, supplier_id, grant.actor_id,
            )
            return _snapshot(product_list)

    def update_product_list(
        self,
        grant: CapabilityGrant,
        list_id: str,
        status: Any = None,
        items: Optional[Iterable[Mapping[str, Any]]] = None,
    ) -> Optional[ProductList]:
        """
        Change a list's status and/or replace its items.

        Both changes are validated first and applied together.
        Returns None if the list does not exist.
        """
        verify_grant(grant, Capability.ORDER_UPDATE)
        new_status = None
        if status is not None:
            new_status = convert(ProductList, {"status": status})["status"]
        new_items_raw = _require_items(items) if items is not None else None

        with self._lock:
            product_list = self._product_lists.get(list_id)
            if product_list is None:
                return None
            new_items = None
            if new_items_raw is not None:
                new_items = self._prepare_list_items(list_id, new_items_raw)

            if new_status is not None:
                product_list.status = new_status
            if new_items is not None:
                self._store_items(product_list, new_items)
            logger.info("Product list %s updated by %s", list_id, grant.actor_id)
            return _snapshot(product_list)

    def replace_items(
        self, grant: CapabilityGrant, list_id: str, items: Iterable[Mapping[str, Any]]
    ) -> ProductList:
        """
        Replace all items of a list and recompute ``total_quantity``.

        Raises:
            NotFound: If the list does not exist
        """
        updated = self.update_product_list(grant, list_id, items=items)
        if updated is None:
            raise NotFound("Product list", list_id)
        return updated

    def _items_of(self, list_id: str) -> List[ProductListItem]:
        return [item for item in self._product_list_items.values() if item.product_list_id == list_id]

    def _prepare_list_items(self, list_id: str, items: List[Mapping[str, Any]]) -> List[ProductListItem]:
        prepared: List[ProductListItem] = []
        taken = set(self._product_list_items)
        for item in items:
            data = convert(ProductListItem, item, allowed=("product_id", "quantity", "price"))
            product_id = _require_text(data.get("product_id"), "product_id")
            if "quantity" not in data:
                raise ValidationFailed("quantity is required", details={"field": "quantity"})
            _check_quantity(data["quantity"], minimum=0)
            item_id = self._ids.next_id("product_list_items", taken)
            taken.add(item_id)
            prepared.append(ProductListItem(
                id=item_id,
                product_list_id=list_id,
                product_id=product_id,
                quantity=data["quantity"],
                price=data.get("price") or 0.0,
            ))
        return prepared

    def _store_items(self, product_list: ProductList, items: List[ProductListItem]) -> None:
        """Swap in a list's item set and recompute its total. Lock must be held."""
        for old in self._items_of(product_list.id):
            del self._product_list_items[old.id]
        for item in items:
            self._product_list_items[item.id] = item
        product_list.total_quantity = sum(item.quantity for item in items)
