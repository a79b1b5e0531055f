"""
Pydantic schemas for invoice requests, responses and pipeline results
"""
from pydantic import BaseModel, Field, ConfigDict
from datetime import datetime
from typing import Optional


class RegenerateInvoiceRequest(BaseModel):
    """Schema for a manual regeneration call"""
    orderId: Optional[str] = Field("", description="Order to regenerate the invoice for")


class RegenerateInvoiceResponse(BaseModel):
    """Schema for a successful regeneration"""
    success: bool = True
    invoiceUrl: str


class ErrorDetail(BaseModel):
    """Structured error returned in HTTPException detail"""
    code: str
    message: str


class InvoiceResult(BaseModel):
    """Outcome of one successful render -> store -> update run"""
    order_id: str
    invoice_id: str
    invoice_url: str
    generated_at: datetime
    size_bytes: int

    model_config = ConfigDict(frozen=True)
