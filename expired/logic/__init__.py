"""Core business logic layer.

Subpackages:
- products: product list view state and expiry analysis
"""
__all__ = ["products"]
