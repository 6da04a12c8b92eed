"""Role definitions for ExhibitFlow.

Four fixed roles:
1. Admin - Full access, the only role that can delete products
2. Manager - Runs exhibitions, approves products, updates orders
3. Operator - Registers products and places orders
4. Viewer - Read-only access
"""

from enum import Enum
from typing import Dict


class Role(str, Enum):
    """Roles an actor can hold."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    OPERATOR = "OPERATOR"
    VIEWER = "VIEWER"


ROLE_DESCRIPTIONS: Dict[Role, str] = {
    Role.ADMIN: "Full system access with all capabilities",
    Role.MANAGER: "Manages exhibitions, approvals and order updates",
    Role.OPERATOR: "Registers products, lists and orders",
    Role.VIEWER: "Basic read-only access",
}


# Preloaded actors; no runtime creation
DEFAULT_ACTORS: list[dict] = [
    {"id": "u1", "username": "admin", "role": Role.ADMIN, "full_name": "Super Admin"},
    {"id": "u2", "username": "manager", "role": Role.MANAGER, "full_name": "Project Manager"},
    {"id": "u3", "username": "staff", "role": Role.OPERATOR, "full_name": "Operational Staff"},
    {"id": "u4", "username": "viewer", "role": Role.VIEWER, "full_name": "Read Only Viewer"},
]
