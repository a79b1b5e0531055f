"""
Models package
"""
from invoice_service.models.order import Order
from invoice_service.models.user import User

__all__ = ["Order", "User"]
