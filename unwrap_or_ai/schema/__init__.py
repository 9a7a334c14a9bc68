"""Schema derivation for recovery target types."""

from .deriver import TargetSchema, clear_schema_cache, derive_schema, schema_name, simple_schema

__all__ = ["TargetSchema", "derive_schema", "schema_name", "simple_schema", "clear_schema_cache"]
