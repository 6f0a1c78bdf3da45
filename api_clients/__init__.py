"""HTTP clients for external vocabulary sources."""

from .schemaorg_client import SchemaOrgClient, SchemaOrgError

__all__ = ["SchemaOrgClient", "SchemaOrgError"]
