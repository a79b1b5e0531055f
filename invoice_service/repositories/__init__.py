"""
Repositories package
"""
from invoice_service.repositories.order_repository import OrderRepository
from invoice_service.repositories.user_repository import UserRepository

__all__ = ["OrderRepository", "UserRepository"]
