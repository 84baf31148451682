"""Packaged JSON schemas and validation helpers."""

from bouncer.schemas.validator import get_schema, validate_data

__all__ = ["get_schema", "validate_data"]
