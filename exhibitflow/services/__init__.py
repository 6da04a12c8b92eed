"""Service layer for ExhibitFlow."""

from .workflow import WorkflowService, to_dict

__all__ = ["WorkflowService", "to_dict"]
