"""Memory-resident workflow store."""

from .seed import SeedData, default_seed, load_seed, parse_seed
from .workflow import WorkflowStore

__all__ = [
    "SeedData",
    "WorkflowStore",
    "default_seed",
    "load_seed",
    "parse_seed",
]
