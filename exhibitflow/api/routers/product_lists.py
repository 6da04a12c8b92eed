"""Supplier product list endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from exhibitflow.api.deps import get_current_actor, get_service
from exhibitflow.api.schemas import ProductListCreate, ProductListUpdate, dump_items
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor

router = APIRouter(prefix="/product-lists", tags=["product-lists"])


@router.get("")
def list_product_lists(
    exhibition_code: Optional[str] = Query(None),
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.list_product_lists(current_actor, exhibition_code)


@router.post("", status_code=status.HTTP_201_CREATED)
def create_product_list(
    body: ProductListCreate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    return service.create_product_list(
        current_actor, body.exhibition_code, body.supplier_id, dump_items(body.items)
    )


@router.get("/{list_id}")
def get_product_list(
    list_id: str,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """A product list with its items and their product details."""
    return service.get_product_list_with_items(current_actor, list_id)


@router.put("/{list_id}")
def update_product_list(
    list_id: str,
    body: ProductListUpdate,
    service: WorkflowService = Depends(get_service),
    current_actor: Actor = Depends(get_current_actor),
):
    """Change the status and/or replace the items of a list."""
    items = dump_items(body.items) if body.items is not None else None
    return service.update_product_list(current_actor, list_id, status=body.status, items=items)
