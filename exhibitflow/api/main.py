from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from exhibitflow import __version__
from exhibitflow.api.schemas import ErrorResponse
from exhibitflow.api.routers import approvals, exhibitions, me, orders, product_lists, products
from exhibitflow.common.logger import configure_from_settings, get_logger
from exhibitflow.core.config import Settings, get_settings
from exhibitflow.core.errors import (
    Conflict,
    Forbidden,
    NotFound,
    Unauthenticated,
    ValidationFailed,
    WorkflowError,
)
from exhibitflow.services import WorkflowService
from exhibitflow.store import WorkflowStore, default_seed, load_seed

logger = get_logger(__name__)

ERROR_STATUS = {
    Unauthenticated: status.HTTP_401_UNAUTHORIZED,
    Forbidden: status.HTTP_403_FORBIDDEN,
    NotFound: status.HTTP_404_NOT_FOUND,
    ValidationFailed: status.HTTP_400_BAD_REQUEST,
    Conflict: status.HTTP_409_CONFLICT,
}


def status_for(exc: WorkflowError) -> int:
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def build_store(settings: Settings) -> WorkflowStore:
    """Create the process-wide store from the configured seed."""
    if settings.seed_path:
        logger.info("Loading seed data from %s", settings.seed_path)
        return WorkflowStore(load_seed(settings.seed_path))
    if settings.load_default_seed:
        return WorkflowStore(default_seed())
    return WorkflowStore()


def create_app(settings: Optional[Settings] = None, store: Optional[WorkflowStore] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        settings: Settings to use; environment-derived by default
        store: Store to serve; built from the configured seed by default
    """
    settings = settings or get_settings()
    configure_from_settings(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Role-gated exhibition, approval and ordering workflow",
        version=__version__,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    app.state.settings = settings
    app.state.service = WorkflowService(store if store is not None else build_store(settings))

    @app.exception_handler(WorkflowError)
    async def workflow_error_handler(request: Request, exc: WorkflowError):
        code = status_for(exc)
        headers = {"WWW-Authenticate": "X-User-Id"} if code == status.HTTP_401_UNAUTHORIZED else None
        body = ErrorResponse(**exc.to_dict()).model_dump(exclude_none=True)
        return JSONResponse(status_code=code, content=body, headers=headers)

    app.include_router(products.router, prefix="/api")
    app.include_router(exhibitions.router, prefix="/api")
    app.include_router(approvals.router, prefix="/api")
    app.include_router(orders.router, prefix="/api")
    app.include_router(product_lists.router, prefix="/api")
    app.include_router(me.router, prefix="/api")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "version": __version__}

    @app.get("/")
    async def root():
        return {
            "name": settings.app_name,
            "version": __version__,
            "docs": "/docs" if settings.debug else None,
        }

    return app
