"""Core domain logic for ExhibitFlow."""
