"""
Django model registry for the orders app.
"""
from orders.infrastructure.models import Order

__all__ = ["Order"]
