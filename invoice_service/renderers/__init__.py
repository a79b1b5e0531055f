"""
Renderers package
"""
from invoice_service.renderers.invoice_pdf import build_invoice_layout, render_invoice

__all__ = ["build_invoice_layout", "render_invoice"]
