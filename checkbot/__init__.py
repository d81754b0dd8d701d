"""Stateless checklist bot core: parsing, signed locations, and copy synchronization."""
