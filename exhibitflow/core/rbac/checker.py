"""Capability checking utilities for ExhibitFlow.

``authorize`` is the gate in front of every workflow operation. It returns a
``CapabilityGrant`` that mutating store methods demand and re-verify, so a
store mutation cannot run without passing through the policy.
"""

from dataclasses import dataclass
from typing import Iterable, Optional, Union

from exhibitflow.common.logger import get_logger
from exhibitflow.core.errors import Forbidden, Unauthenticated

from .permissions import Capability, evaluate
from .roles import Role

logger = get_logger(__name__)


class PermissionChecker:
    """Checks capabilities held by a single role."""

    def __init__(self, role: Union[Role, str, None]):
        self.role = role

    def has_capability(self, capability: Union[str, Capability]) -> bool:
        return evaluate(self.role, capability)

    def has_any_capability(self, capabilities: Iterable[Union[str, Capability]]) -> bool:
        """Check if the role holds any of the given capabilities."""
        return any(self.has_capability(c) for c in capabilities)

    def has_all_capabilities(self, capabilities: Iterable[Union[str, Capability]]) -> bool:
        """Check if the role holds all of the given capabilities."""
        return all(self.has_capability(c) for c in capabilities)


@dataclass(frozen=True)
class CapabilityGrant:
    """Proof that ``actor_id`` passed the policy check for ``capability``."""

    capability: Capability
    actor_id: str
    role: Role


def has_capability(actor, capability: Union[str, Capability]) -> bool:
    """
    Check if an actor holds a capability.

    Args:
        actor: Object with a ``role`` attribute, or None

    Returns:
        True if the actor's role is allowed the capability
    """
    if actor is None or not getattr(actor, "role", None):
        return False
    return evaluate(actor.role, capability)


def authorize(actor, capability: Union[str, Capability]) -> CapabilityGrant:
    """
    Check ``actor`` against the policy and issue a grant.

    Raises:
        Unauthenticated: If no actor was resolved
        Forbidden: If the actor's role lacks the capability
    """
    if actor is None:
        raise Unauthenticated()

    if not evaluate(actor.role, capability):
        logger.warning(
            "Denied %s to actor %s (role %s)",
            getattr(capability, "value", capability), actor.id, getattr(actor.role, "value", actor.role),
        )
        raise Forbidden(capability, actor.role)

    return CapabilityGrant(capability=Capability(capability), actor_id=actor.id, role=Role(actor.role))


def verify_grant(grant: Optional[CapabilityGrant], required: Capability) -> CapabilityGrant:
    """
    Re-check a grant inside the store.

    The grant must be for exactly ``required`` and its role must still be
    allowed by the policy.

    Raises:
        Forbidden: If the grant is missing, mismatched or not allowed
    """
    if not isinstance(grant, CapabilityGrant) or grant.capability != required:
        raise Forbidden(required, getattr(grant, "role", None))
    if not evaluate(grant.role, required):
        raise Forbidden(required, grant.role)
    return grant
