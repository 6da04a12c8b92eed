"""RBAC (Role-Based Access Control) module for ExhibitFlow.

This module defines the roles, the capability policy table, and the
checks every workflow operation goes through.
"""

from .roles import Role, DEFAULT_ACTORS
from .permissions import Capability, Resource, Action, ROLE_POLICY, evaluate
from .checker import (
    CapabilityGrant,
    PermissionChecker,
    authorize,
    has_capability,
    verify_grant,
)

__all__ = [
    "Role",
    "DEFAULT_ACTORS",
    "Capability",
    "Resource",
    "Action",
    "ROLE_POLICY",
    "evaluate",
    "CapabilityGrant",
    "PermissionChecker",
    "authorize",
    "has_capability",
    "verify_grant",
]
