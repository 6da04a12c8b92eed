"""Approval workflow module for ExhibitFlow.

Implements the per-exhibition product approval states.
"""

from .states import (
    ExhibitionProductStatus,
    ApprovalTransition,
    TransitionRule,
    TRANSITION_RULES,
    VALID_TRANSITIONS,
    can_transition,
    get_target_state,
    transition_for_status,
)

__all__ = [
    "ExhibitionProductStatus",
    "ApprovalTransition",
    "TransitionRule",
    "TRANSITION_RULES",
    "VALID_TRANSITIONS",
    "can_transition",
    "get_target_state",
    "transition_for_status",
]
