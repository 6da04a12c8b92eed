"""Current actor endpoint."""

from fastapi import APIRouter, Depends

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/me", tags=["identity"])


@router.get("")
def get_me(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """The acting user, their role description and capabilities."""
    return service.describe_actor(current_actor)
