"""Capability model for ExhibitFlow RBAC.

Capabilities are resource/action pairs rendered as "resource:action".
Examples:
  - products:create
  - approvals:approve
  - orders:read

``ROLE_POLICY`` is the one place that decides which role holds which
capability. Route handlers, the service layer and the store all consult it
through ``evaluate``.
"""

from enum import Enum
from typing import FrozenSet, Optional, Union

from .roles import Role


class Resource(str, Enum):
    """Resources guarded by capabilities."""

    PRODUCTS = "products"
    EXHIBITIONS = "exhibitions"
    APPROVALS = "approvals"       # Per-exhibition product approvals
    ORDERS = "orders"             # Orders and product lists


class Action(str, Enum):
    """Actions that can be performed on resources."""

    CREATE = "create"
    READ = "read"
    UPDATE = "update"
    DELETE = "delete"
    APPROVE = "approve"


class Capability(str, Enum):
    """Every capability the workflow knows about."""

    PRODUCT_CREATE = "products:create"
    PRODUCT_READ = "products:read"
    PRODUCT_UPDATE = "products:update"
    PRODUCT_DELETE = "products:delete"

    EXHIBITION_CREATE = "exhibitions:create"
    EXHIBITION_READ = "exhibitions:read"
    EXHIBITION_UPDATE = "exhibitions:update"

    APPROVAL_APPROVE = "approvals:approve"
    APPROVAL_READ = "approvals:read"

    ORDER_CREATE = "orders:create"
    ORDER_READ = "orders:read"
    ORDER_UPDATE = "orders:update"

    @property
    def resource(self) -> Resource:
        return Resource(self.value.split(":")[0])

    @property
    def action(self) -> Action:
        return Action(self.value.split(":")[1])

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, cap_str: str) -> "Capability":
        """Parse a capability string like 'products:read'."""
        parts = cap_str.split(":")
        if len(parts) != 2:
            raise ValueError(f"Invalid capability format: {cap_str}")
        return cls(cap_str)


_ALL_ROLES = frozenset(Role)
_STAFF = frozenset([Role.ADMIN, Role.MANAGER, Role.OPERATOR])
_MANAGEMENT = frozenset([Role.ADMIN, Role.MANAGER])

# Capability -> roles allowed to exercise it
ROLE_POLICY: dict[Capability, FrozenSet[Role]] = {
    Capability.PRODUCT_CREATE: _STAFF,
    Capability.PRODUCT_READ: _ALL_ROLES,
    Capability.PRODUCT_UPDATE: _MANAGEMENT,
    Capability.PRODUCT_DELETE: frozenset([Role.ADMIN]),

    Capability.EXHIBITION_CREATE: _MANAGEMENT,
    Capability.EXHIBITION_READ: _ALL_ROLES,
    Capability.EXHIBITION_UPDATE: _MANAGEMENT,

    Capability.APPROVAL_APPROVE: _MANAGEMENT,
    Capability.APPROVAL_READ: _ALL_ROLES,

    Capability.ORDER_CREATE: _STAFF,
    Capability.ORDER_READ: _ALL_ROLES,
    Capability.ORDER_UPDATE: _MANAGEMENT,
}


def _coerce(enum_cls, value):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return None


def evaluate(role: Union[Role, str, None], capability: Union[Capability, str, None]) -> bool:
    """Check whether ``role`` holds ``capability``.

    Unknown roles and unknown capabilities are denied. Never raises.
    """
    resolved_role: Optional[Role] = _coerce(Role, role)
    resolved_cap: Optional[Capability] = _coerce(Capability, capability)
    if resolved_role is None or resolved_cap is None:
        return False
    return resolved_role in ROLE_POLICY.get(resolved_cap, frozenset())


def is_valid_capability(cap_str: str) -> bool:
    """Check if a capability string is known."""
    return _coerce(Capability, cap_str) is not None


def get_capabilities_for_resource(resource: Resource) -> list[str]:
    """Get all capability strings for a resource."""
    return [str(cap) for cap in Capability if cap.resource == resource]


def get_role_capabilities(role: Union[Role, str]) -> list[str]:
    """Get every capability string ``role`` holds, in declaration order."""
    return [str(cap) for cap in Capability if evaluate(role, cap)]
