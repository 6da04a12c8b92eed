"""Order endpoints."""

from fastapi import APIRouter, Depends, status

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.api.schemas import OrderCreate, OrderStatusUpdate, dump_items
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/orders", tags=["orders"])


@router.get("")
def list_orders(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.list_orders(current_actor)


@router.get("/summary")
def summarize_orders(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Per-exhibition overview of approved product lists."""
    return service.summarize_exhibition_orders(current_actor)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_order(
    body: OrderCreate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Create a draft order; every item must be approved for the exhibition."""
    return service.create_order(current_actor, body.exhibition_code, dump_items(body.items))


@router.get("/{order_id}")
def get_order(
    order_id: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.get_order(current_actor, order_id)


@router.patch("/{order_id}")
def update_order_status(
    order_id: str,
    body: OrderStatusUpdate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.update_order_status(current_actor, order_id, body.status)
