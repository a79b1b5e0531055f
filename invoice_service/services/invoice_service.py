"""
Invoice Service - Business Logic Layer
"""
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.orm import Session

from invoice_service.models.order import Order
from invoice_service.renderers.invoice_pdf import render_invoice
from invoice_service.repositories.order_repository import OrderRepository
from invoice_service.repositories.user_repository import UserRepository
from invoice_service.schemas.invoice import InvoiceResult
from invoice_service.services.errors import (
    InvoicePipelineError,
    AuthenticationError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError
)
from invoice_service.services.status_updater import InvoiceStatusUpdater
from invoice_service.storage.artifact_store import ArtifactStore, get_artifact_store

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"


class InvoiceService:
    """Service layer for the render -> store -> update chain"""

    def __init__(self, db: Session, store: Optional[ArtifactStore] = None):
        self.order_repository = OrderRepository(db)
        self.user_repository = UserRepository(db)
        self.status_updater = InvoiceStatusUpdater(db)
        self.store = store or get_artifact_store()

    def generate_invoice(self, order: Order) -> InvoiceResult:
        """
        Render, store and record an invoice for a loaded order

        Steps run strictly in sequence:
        1. Render the PDF in memory
        2. Write it under a fresh key
        3. Issue a signed read URL
        4. Write the outcome back onto the order

        Returns:
            Result of the successful run

        Raises:
            InvoicePipelineError: After a best-effort failed status write-back
        """
        order_id = order.id
        try:
            pdf_bytes = render_invoice(order)
            key = self.store.build_key(order_id)
            ack = self.store.write(pdf_bytes, key)
            url = self.store.issue_read_url(key)
            generated_at = datetime.now(timezone.utc)
            self.status_updater.mark_ready(order_id, key, url, generated_at)
        except InvoicePipelineError as e:
            self.status_updater.mark_failed(order_id, f"{type(e).__name__}: {e.message}")
            raise

        return InvoiceResult(
            order_id=order_id,
            invoice_id=key,
            invoice_url=url,
            generated_at=generated_at,
            size_bytes=ack.size_bytes
        )

    def process_order_created(self, order_id: str) -> Optional[InvoiceResult]:
        """
        Trigger path: generate the invoice for a newly created order

        Pipeline failures end in the order's invoice_status=failed and are not
        raised; there is no caller to report them to.

        Returns:
            Result on success, None if the failure was absorbed

        Raises:
            NotFoundError: If the order does not exist
            SQLAlchemyError: If the order could not be loaded
        """
        order = self.order_repository.get_by_id(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")

        try:
            return self.generate_invoice(order)
        except InvoicePipelineError as e:
            logger.error("✗ Invoice generation failed for order %s: %s", order_id, e.message)
            return None

    def regenerate_invoice(self, order_id: str, caller_id: Optional[str]) -> InvoiceResult:
        """
        Manual path: re-run the chain for an existing order

        Authorization completes before any rendering starts. Authorization
        failures leave the order untouched.

        Raises:
            AuthenticationError: If there is no caller identity
            InvalidArgumentError: If order_id is empty
            NotFoundError: If the order does not exist
            PermissionDeniedError: If the caller is neither owner nor admin
            InvoicePipelineError: If render, store or write-back fails
        """
        if not caller_id:
            raise AuthenticationError("The function must be called while authenticated")

        if not order_id or not order_id.strip():
            raise InvalidArgumentError("orderId is required")

        order = self.order_repository.get_by_id(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")

        role = self.user_repository.get_role(caller_id)
        if role != ADMIN_ROLE and caller_id != order.user_id:
            logger.warning("✗ Caller %s denied invoice regeneration for order %s", caller_id, order_id)
            raise PermissionDeniedError("Not authorized to regenerate this invoice")

        logger.info("Regenerating invoice for order %s (requested by %s, role=%s)", order_id, caller_id, role)
        return self.generate_invoice(order)
