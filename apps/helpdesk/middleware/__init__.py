"""HTTP middleware components."""

from .rbac import RBACMiddleware

__all__ = ["RBACMiddleware"]
