"""
Order Repository - Data Access Layer
"""
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import update

from invoice_service.models.order import Order


class OrderRepository:
    """Repository for reading orders and writing invoice fields"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, order_id: str) -> Optional[Order]:
        """Get order by ID, always read fresh from the database"""
        return self.db.query(Order).filter(Order.id == order_id).populate_existing().first()

    def create(self, order_data: dict) -> Order:
        """
        Create new order (used by seeding and tests; checkout owns creation)

        Args:
            order_data: Dictionary with order fields

        Returns:
            Created order
        """
        order = Order(**order_data)
        self.db.add(order)
        self.db.commit()
        self.db.refresh(order)
        return order

    def set_invoice_ready(
        self,
        order_id: str,
        invoice_id: str,
        invoice_url: str,
        generated_at: datetime
    ) -> int:
        """Record a successful generation in one UPDATE; returns rows matched"""
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(
                invoice_status='ready',
                invoice_id=invoice_id,
                invoice_url=invoice_url,
                invoice_generated_at=generated_at,
                invoice_error=None
            )
        )
        self.db.commit()
        return result.rowcount

    def set_invoice_failed(self, order_id: str, error: str) -> int:
        """Record a failed generation in one UPDATE; returns rows matched"""
        result = self.db.execute(
            update(Order)
            .where(Order.id == order_id)
            .values(invoice_status='failed', invoice_error=error)
        )
        self.db.commit()
        return result.rowcount
