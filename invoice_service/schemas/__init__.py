"""
Schemas package
"""
from invoice_service.schemas.order import (
    OrderItemSnapshot,
    ShippingAddress,
    OrderSnapshot,
    OrderCreatedData,
    OrderCreatedEvent
)
from invoice_service.schemas.invoice import (
    RegenerateInvoiceRequest,
    RegenerateInvoiceResponse,
    ErrorDetail,
    InvoiceResult
)

__all__ = [
    "OrderItemSnapshot",
    "ShippingAddress",
    "OrderSnapshot",
    "OrderCreatedData",
    "OrderCreatedEvent",
    "RegenerateInvoiceRequest",
    "RegenerateInvoiceResponse",
    "ErrorDetail",
    "InvoiceResult"
]
