"""Common middleware for RoleHub."""

from .observability import StructlogContextMiddleware

__all__ = ["StructlogContextMiddleware"]
