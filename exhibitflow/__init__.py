"""ExhibitFlow: role-gated exhibition, approval and ordering workflow core."""

__version__ = "0.1.0"
