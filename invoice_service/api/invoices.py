"""
Invoice API endpoints (manual regeneration)
"""
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from invoice_service.api.auth import get_current_caller_id
from invoice_service.database import get_db
from invoice_service.schemas.invoice import ErrorDetail, RegenerateInvoiceRequest, RegenerateInvoiceResponse
from invoice_service.services.errors import InvoicePipelineError
from invoice_service.services.invoice_service import InvoiceService
from invoice_service.storage.artifact_store import ArtifactStore, get_artifact_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/invoices", tags=["invoices"])

STATUS_BY_CODE = {
    "unauthenticated": status.HTTP_401_UNAUTHORIZED,
    "invalid-argument": status.HTTP_400_BAD_REQUEST,
    "not-found": status.HTTP_404_NOT_FOUND,
    "permission-denied": status.HTTP_403_FORBIDDEN,
    "internal": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def get_invoice_service(
    db: Session = Depends(get_db),
    store: ArtifactStore = Depends(get_artifact_store)
) -> InvoiceService:
    """Dependency to get InvoiceService instance"""
    return InvoiceService(db, store)


def to_http_error(error: InvoicePipelineError) -> HTTPException:
    """Map a pipeline error onto a structured HTTP error"""
    message = error.message if error.code != "internal" else "Failed to generate invoice"
    return HTTPException(
        status_code=STATUS_BY_CODE.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=ErrorDetail(code=error.code, message=message).model_dump()
    )


@router.post("/regenerate", response_model=RegenerateInvoiceResponse, summary="Regenerate invoice")
def regenerate_invoice(
    request: RegenerateInvoiceRequest,
    caller_id: str = Depends(get_current_caller_id),
    service: InvoiceService = Depends(get_invoice_service)
):
    """
    Regenerate the invoice for an existing order

    Permitted for the order's owner and for admins. Returns a newly signed
    URL for the new artifact.

    - **orderId**: Order ID (required)
    """
    try:
        result = service.regenerate_invoice(request.orderId, caller_id)
    except InvoicePipelineError as e:
        raise to_http_error(e)
    except SQLAlchemyError as e:
        logger.error("✗ Order repository error during regeneration: %s", e)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"code": "internal", "message": "Failed to generate invoice"}
        )

    return RegenerateInvoiceResponse(success=True, invoiceUrl=result.invoice_url)
