"""Exhibition endpoints."""

from fastapi import APIRouter, Depends, status

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.api.schemas import (
    ExhibitionCreate,
    ExhibitionProductsAdd,
    ExhibitionUpdate,
    dump_items,
)
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/exhibitions", tags=["exhibitions"])


@router.get("")
def list_exhibitions(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.list_exhibitions(current_actor)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_exhibition(
    body: ExhibitionCreate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Create an exhibition; listed products start out pending."""
    fields = body.model_dump(exclude_none=True, exclude={"products"})
    return service.create_exhibition(current_actor, fields, dump_items(body.products))


@router.get("/{id_or_code}")
def get_exhibition(
    id_or_code: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Fetch an exhibition by internal id or exhibition code."""
    return service.get_exhibition(current_actor, id_or_code)


@router.put("/{exhibition_id}")
def update_exhibition(
    exhibition_id: str,
    body: ExhibitionUpdate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.update_exhibition(current_actor, exhibition_id, body.model_dump(exclude_none=True))


@router.get("/{exhibition_code}/products")
def list_exhibition_products(
    exhibition_code: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.list_exhibition_products(current_actor, exhibition_code)


@router.post("/{exhibition_code}/products", status_code=status.HTTP_201_CREATED)
def add_exhibition_products(
    exhibition_code: str,
    body: ExhibitionProductsAdd,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.add_exhibition_products(current_actor, exhibition_code, dump_items(body.products))
