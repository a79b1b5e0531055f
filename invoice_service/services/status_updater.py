"""
Status Updater - writes invoice outcomes back onto the order record

No locks are taken. Concurrent runs for the same order converge to whichever
update commits last.
"""
import logging
from datetime import datetime
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_service.repositories.order_repository import OrderRepository
from invoice_service.services.errors import StatusUpdateError

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 500


class InvoiceStatusUpdater:
    """Write-back of invoice fields"""

    def __init__(self, db: Session):
        self.db = db
        self.repository = OrderRepository(db)

    def mark_ready(self, order_id: str, invoice_id: str, invoice_url: str, generated_at: datetime) -> None:
        """
        Record a successful generation

        Raises:
            StatusUpdateError: If the write-back fails or the order is gone
        """
        try:
            matched = self.repository.set_invoice_ready(order_id, invoice_id, invoice_url, generated_at)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StatusUpdateError(f"Failed to record invoice for order {order_id}: {e}") from e

        if not matched:
            raise StatusUpdateError(f"Order {order_id} disappeared before invoice write-back")

        logger.info("✓ Order %s invoice ready: %s", order_id, invoice_id)

    def mark_failed(self, order_id: str, error: str) -> bool:
        """
        Record a failed generation. Best effort: never raises.

        Returns:
            True if the failure was recorded
        """
        message = (error or "unknown error")[:MAX_ERROR_LENGTH]
        try:
            matched = self.repository.set_invoice_failed(order_id, message)
        except Exception:
            logger.exception("✗ Could not record invoice failure for order %s", order_id)
            try:
                self.db.rollback()
            except Exception:
                logger.exception("✗ Rollback failed for order %s", order_id)
            return False

        if not matched:
            logger.warning("✗ Order %s not found while recording invoice failure", order_id)
            return False

        logger.warning("✗ Order %s invoice failed: %s", order_id, message)
        return True
