"""HTTP layer for ExhibitFlow."""
