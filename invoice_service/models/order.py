"""
SQLAlchemy Order model
"""
import uuid

from sqlalchemy import Column, String, Numeric, DateTime, Text, JSON, CheckConstraint
from sqlalchemy.sql import func
from invoice_service.database import Base

ORDER_STATUSES = ('pending', 'processing', 'shipped', 'delivered', 'cancelled')
INVOICE_STATUSES = ('none', 'pending', 'ready', 'failed')


def _new_order_id() -> str:
    return uuid.uuid4().hex


class Order(Base):
    """Order database model

    Core fields are written once by checkout. The invoice_* fields belong to
    the invoice pipeline.
    """

    __tablename__ = "orders"

    id = Column(String(64), primary_key=True, default=_new_order_id)
    user_id = Column(String(128), nullable=False, index=True)
    user_email = Column(String(255), nullable=False)
    items = Column(JSON, nullable=False, default=list)  # [{productId, name, price, quantity, imageUrl}]
    total_amount = Column(Numeric(12, 2), nullable=False)
    shipping_address = Column(JSON, nullable=True)  # {address, city, zipCode, phone}
    status = Column(String(50), nullable=False, default='pending', index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    # Invoice pipeline fields
    invoice_status = Column(String(20), nullable=False, default='none', server_default='none')
    invoice_url = Column(Text, nullable=False, default='', server_default='')
    invoice_id = Column(String(255), nullable=True)
    invoice_generated_at = Column(DateTime(timezone=True), nullable=True)
    invoice_error = Column(String(500), nullable=True)

    # Constraints
    __table_args__ = (
        CheckConstraint('total_amount >= 0', name='check_total_amount_non_negative'),
        CheckConstraint(
            "status IN ('pending', 'processing', 'shipped', 'delivered', 'cancelled')",
            name='check_status_valid'
        ),
        CheckConstraint(
            "invoice_status IN ('none', 'pending', 'ready', 'failed')",
            name='check_invoice_status_valid'
        ),
    )

    def __repr__(self):
        return f"<Order(id='{self.id}', user_id='{self.user_id}', invoice_status='{self.invoice_status}')>"
