from typing import Optional

from fastapi import Depends, Header, Request

from exhibitflow.core.config import Settings
from exhibitflow.services import WorkflowService
from exhibitflow.store.models import Actor


def get_settings_dep(request: Request) -> Settings:
    """Settings the running app was built with."""
    return request.app.state.settings


def get_service(request: Request) -> WorkflowService:
    """Workflow service bound to the app's store."""
    return request.app.state.service


def get_current_actor(
    x_user_id: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings_dep),
    service: WorkflowService = Depends(get_service),
) -> Actor:
    """Resolve the acting user from the X-User-Id header.

    Demo identity only: the header names a preloaded actor. Falls back to
    ``settings.default_actor_id`` when the header is absent.
    """
    return service.resolve_actor(x_user_id or settings.default_actor_id)
