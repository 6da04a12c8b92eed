"""Per-exhibition product approval endpoints."""

from fastapi import APIRouter, Depends

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.api.schemas import ApprovalDecision
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/approvals", tags=["approvals"])


@router.get("")
def list_pending_approvals(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """List exhibition products awaiting review."""
    return service.list_pending_approvals(current_actor)


@router.post("")
def decide_approval(
    body: ApprovalDecision,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Approve or reject an exhibition product."""
    return service.set_approval(current_actor, body.id, body.status)
