"""Product catalogue endpoints."""

from fastapi import APIRouter, Depends, status

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.api.schemas import ProductCreate, ProductUpdate
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/products", tags=["products"])


@router.get("")
def list_products(
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.list_products(current_actor)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Register a product. New products are never pre-approved."""
    return service.create_product(current_actor, body.model_dump(exclude_none=True))


@router.get("/{product_id}")
def get_product(
    product_id: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.get_product(current_actor, product_id)


@router.put("/{product_id}")
def update_product(
    product_id: str,
    body: ProductUpdate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Partially update a product; omitted fields are left untouched."""
    return service.update_product(current_actor, product_id, body.model_dump(exclude_none=True))


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    service.delete_product(current_actor, product_id)
    return {"message": "Product deleted"}
