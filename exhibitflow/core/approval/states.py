"""Exhibition product approval states and transitions.

State Machine Diagram:

    ┌──────────┐
    │ PENDING  │ ← Initial state (product listed on an exhibition)
    └────┬─────┘
         │
         ├─────────────────────┐
         │                     │
    ┌────▼─────┐         ┌─────▼────┐
    │ APPROVED │◄───────►│ REJECTED │
    └──────────┘         └──────────┘

A reviewer may approve or reject from any state, and re-approving an
approved row is a no-op success. Nothing leads back to PENDING.
"""

from enum import Enum
from typing import Dict, NamedTuple, Optional, Set, Union

from exhibitflow.core.errors import ValidationFailed


class ExhibitionProductStatus(str, Enum):
    """Approval status of a product on one exhibition."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ApprovalTransition(str, Enum):
    """Reviewer actions."""

    APPROVE = "approve"
    REJECT = "reject"


class TransitionRule(NamedTuple):
    """Defines a valid state transition."""
    from_state: ExhibitionProductStatus
    to_state: ExhibitionProductStatus
    transition: ApprovalTransition


TRANSITION_RULES: list[TransitionRule] = [
    TransitionRule(ExhibitionProductStatus.PENDING, ExhibitionProductStatus.APPROVED, ApprovalTransition.APPROVE),
    TransitionRule(ExhibitionProductStatus.PENDING, ExhibitionProductStatus.REJECTED, ApprovalTransition.REJECT),
    TransitionRule(ExhibitionProductStatus.APPROVED, ExhibitionProductStatus.APPROVED, ApprovalTransition.APPROVE),
    TransitionRule(ExhibitionProductStatus.APPROVED, ExhibitionProductStatus.REJECTED, ApprovalTransition.REJECT),
    TransitionRule(ExhibitionProductStatus.REJECTED, ExhibitionProductStatus.APPROVED, ApprovalTransition.APPROVE),
    TransitionRule(ExhibitionProductStatus.REJECTED, ExhibitionProductStatus.REJECTED, ApprovalTransition.REJECT),
]

# Build lookup tables for efficient access
VALID_TRANSITIONS: Dict[ExhibitionProductStatus, Set[ApprovalTransition]] = {}
TRANSITION_TARGETS: Dict[tuple[ExhibitionProductStatus, ApprovalTransition], TransitionRule] = {}

for rule in TRANSITION_RULES:
    VALID_TRANSITIONS.setdefault(rule.from_state, set()).add(rule.transition)
    TRANSITION_TARGETS[(rule.from_state, rule.transition)] = rule

# Requested status -> reviewer action
_STATUS_TRANSITIONS: Dict[ExhibitionProductStatus, ApprovalTransition] = {
    ExhibitionProductStatus.APPROVED: ApprovalTransition.APPROVE,
    ExhibitionProductStatus.REJECTED: ApprovalTransition.REJECT,
}


def can_transition(from_state: ExhibitionProductStatus, transition: ApprovalTransition) -> bool:
    """Check if a transition is valid from the given state."""
    return transition in VALID_TRANSITIONS.get(from_state, set())


def get_target_state(
    from_state: ExhibitionProductStatus, transition: ApprovalTransition
) -> Optional[ExhibitionProductStatus]:
    """Get the target state for a transition."""
    rule = TRANSITION_TARGETS.get((from_state, transition))
    return rule.to_state if rule else None


def transition_for_status(status: Union[ExhibitionProductStatus, str]) -> ApprovalTransition:
    """Map a requested status onto the reviewer action that produces it.

    Raises:
        ValidationFailed: If ``status`` is not ``approved`` or ``rejected``
    """
    try:
        requested = ExhibitionProductStatus(status)
    except ValueError:
        requested = None
    transition = _STATUS_TRANSITIONS.get(requested)
    if transition is None:
        raise ValidationFailed(
            f"Invalid status: {getattr(status, 'value', status)!r}",
            details={"allowed": [s.value for s in _STATUS_TRANSITIONS]},
        )
    return transition
