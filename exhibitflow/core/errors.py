"""Error taxonomy for ExhibitFlow.

Every failure surfaced by the store or the service layer is one of these
exceptions. Callers (the HTTP layer, scripts, tests) decide how to present
them; nothing in the core aborts the process.
"""

from typing import Any, Dict, Optional


class WorkflowError(Exception):
    """Base class for all workflow errors."""

    code = "workflow_error"

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"error": self.code, "detail": self.message}
        if self.details:
            data["details"] = self.details
        return data


class Unauthenticated(WorkflowError):
    """No actor could be resolved for the request."""

    code = "unauthenticated"

    def __init__(self, message: str = "Authentication required", **kwargs):
        super().__init__(message, **kwargs)


class Forbidden(WorkflowError):
    """The actor's role lacks the required capability."""

    code = "forbidden"

    def __init__(self, capability: Any, role: Any = None):
        cap = getattr(capability, "value", capability)
        role_value = getattr(role, "value", role)
        super().__init__(
            f"Insufficient permissions. Required: {cap}",
            details={"capability": cap, "role": role_value},
        )
        self.capability = capability
        self.role = role


class NotFound(WorkflowError):
    """A referenced entity does not exist."""

    code = "not_found"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(
            f"{entity} {entity_id} not found",
            details={"entity": entity, "id": entity_id},
        )
        self.entity = entity
        self.entity_id = entity_id


class ValidationFailed(WorkflowError):
    """Malformed input or a violated business rule."""

    code = "validation_failed"


class UnapprovedProductError(ValidationFailed):
    """An order referenced a product not approved for its exhibition."""

    def __init__(self, exhibition_code: str, product_id: str, product_name: Optional[str] = None):
        super().__init__(
            "Cannot create order with unapproved products",
            details={
                "exhibition_code": exhibition_code,
                "product_id": product_id,
                "product_name": product_name,
                "reason": (
                    f'Product "{product_name}" (ID: {product_id}) '
                    f"is not approved for exhibition {exhibition_code}"
                ),
            },
        )
        self.exhibition_code = exhibition_code
        self.product_id = product_id
        self.product_name = product_name


class Conflict(WorkflowError):
    """A uniqueness constraint would be violated."""

    code = "conflict"
