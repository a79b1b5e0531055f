"""
Invoice PDF renderer

Pure transform: order snapshot -> single-page PDF bytes. No I/O, and the same
order always renders to the same bytes (the PDF creation date is pinned to the
order's creation time).

The page is not paginated. Orders with more rows than fit on one page run off
the bottom edge.
"""
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, List, Optional

from fpdf import FPDF
from pydantic import BaseModel, ValidationError

from invoice_service.config import settings
from invoice_service.schemas.order import OrderSnapshot
from invoice_service.services.errors import RenderError

PAGE_FORMAT = "letter"  # 612 x 792 pt

# Layout constants (points, top-left origin, y is the text baseline)
X_LEFT = 50
X_RIGHT = 562
X_SHIP_TO = 320
X_QTY = 300
X_UNIT_PRICE_RIGHT = 440
X_TOTALS_LABEL_RIGHT = 440
NAME_COLUMN_W = 230

COMPANY_Y = 70
TAGLINE_Y = 90
INFO_Y = 130
INFO_LINE_H = 16
ADDRESS_LABEL_Y = 180
ADDRESS_LINE_H = 15
TABLE_TOP_Y = 260
ITEM_ROW_H = 20
TOTAL_ROW_H = 18
FOOTER_Y = 740

FONT_FAMILY = "Helvetica"
FONT_SIZE_COMPANY = 24
FONT_SIZE_TITLE = 20
FONT_SIZE_TAGLINE = 12
FONT_SIZE_NORMAL = 11
FONT_SIZE_TABLE = 10
FONT_SIZE_FOOTER = 8

COLOR_TEXT = (33, 33, 33)
COLOR_MUTED = (110, 110, 110)
COLOR_RULE = (160, 160, 160)

INVOICE_NUMBER_LENGTH = 12
CURRENCY_SYMBOL = "$"
CENT = Decimal("0.01")
ZERO = Decimal("0.00")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)
FOOTER_TEXT = "Thank you for your purchase!"


class InvoiceRow(BaseModel):
    """One rendered item row"""
    name: str
    quantity: str
    unit_price: str
    line_total: str


class InvoiceLayout(BaseModel):
    """Everything printed on the invoice, already formatted"""
    company_name: str
    company_tagline: str
    invoice_number: str
    invoice_date: str
    order_status: str
    bill_to: List[str]
    ship_to: List[str]
    rows: List[InvoiceRow]
    subtotal: Decimal
    shipping: Decimal = ZERO
    tax: Decimal = ZERO
    total_due: Decimal
    issued_at: datetime

    @property
    def subtotal_text(self) -> str:
        return format_money(self.subtotal)

    @property
    def total_due_text(self) -> str:
        return format_money(self.total_due)


def format_money(amount: Decimal) -> str:
    return f"{CURRENCY_SYMBOL}{Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP):.2f}"


def invoice_number(order_id: str) -> str:
    return order_id[:INVOICE_NUMBER_LENGTH].upper()


def to_snapshot(order: Any) -> OrderSnapshot:
    """
    Normalize an ORM Order, a mapping or a snapshot into an OrderSnapshot

    Raises:
        RenderError: If required fields are missing or malformed
    """
    if isinstance(order, OrderSnapshot):
        return order

    if hasattr(order, "__table__"):
        order = {column.name: getattr(order, column.name) for column in order.__table__.columns}

    try:
        return OrderSnapshot.model_validate(order)
    except ValidationError as e:
        first = e.errors()[0]
        location = ".".join(str(part) for part in first["loc"]) or "order"
        raise RenderError(f"invalid order: {location}: {first['msg']}") from e


def _issued_at(created_at: Optional[datetime]) -> datetime:
    if created_at is None:
        return EPOCH
    if created_at.tzinfo is None:
        return created_at.replace(tzinfo=timezone.utc)
    return created_at


def build_invoice_layout(order: Any) -> InvoiceLayout:
    """
    Compute the printable content of an invoice

    The subtotal is recomputed from the items. The total due is taken from
    the order's totalAmount as recorded at checkout; the two are not
    reconciled and may differ.

    Raises:
        RenderError: If the order cannot be rendered
    """
    snapshot = to_snapshot(order)

    if not snapshot.items:
        raise RenderError("invalid order: order has no items")

    rows = []
    subtotal = ZERO
    for item in snapshot.items:
        line_total = item.price * item.quantity
        subtotal += line_total
        rows.append(InvoiceRow(
            name=item.name,
            quantity=str(item.quantity),
            unit_price=format_money(item.price),
            line_total=format_money(line_total)
        ))

    issued_at = _issued_at(snapshot.created_at)
    address = snapshot.shipping_address

    return InvoiceLayout(
        company_name=settings.COMPANY_NAME,
        company_tagline=settings.COMPANY_TAGLINE,
        invoice_number=invoice_number(snapshot.id),
        invoice_date=issued_at.strftime("%b %d, %Y") if snapshot.created_at else "N/A",
        order_status=snapshot.status.capitalize(),
        bill_to=[snapshot.user_email, f"Phone: {address.phone}"],
        ship_to=[address.address, f"{address.city}, {address.zip_code}"],
        rows=rows,
        subtotal=subtotal.quantize(CENT, rounding=ROUND_HALF_UP),
        total_due=snapshot.total_amount.quantize(CENT, rounding=ROUND_HALF_UP),
        issued_at=issued_at
    )


def _latin1(text: str) -> str:
    # core PDF fonts only cover latin-1
    return str(text).encode("latin-1", "replace").decode("latin-1")


class _InvoicePage:
    """Thin drawing helper around an FPDF page"""

    def __init__(self, pdf: FPDF):
        self.pdf = pdf

    def text(self, x: float, y: float, text: str, size: int, bold: bool = False,
             color=COLOR_TEXT) -> None:
        self.pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        self.pdf.set_text_color(*color)
        self.pdf.text(x, y, _latin1(text))

    def text_right(self, right: float, y: float, text: str, size: int, bold: bool = False,
                   color=COLOR_TEXT) -> None:
        self.pdf.set_font(FONT_FAMILY, "B" if bold else "", size)
        width = self.pdf.get_string_width(_latin1(text))
        self.text(right - width, y, text, size, bold=bold, color=color)

    def clipped(self, text: str, size: int, max_width: float) -> str:
        self.pdf.set_font(FONT_FAMILY, "", size)
        text = _latin1(text)
        if self.pdf.get_string_width(text) <= max_width:
            return text
        while text and self.pdf.get_string_width(text + "...") > max_width:
            text = text[:-1]
        return text + "..."

    def rule(self, y: float) -> None:
        self.pdf.set_draw_color(*COLOR_RULE)
        self.pdf.set_line_width(0.75)
        self.pdf.line(X_LEFT, y, X_RIGHT, y)


def _draw_header(page: _InvoicePage, layout: InvoiceLayout) -> None:
    page.text(X_LEFT, COMPANY_Y, layout.company_name, FONT_SIZE_COMPANY, bold=True)
    page.text(X_LEFT, TAGLINE_Y, layout.company_tagline, FONT_SIZE_TAGLINE, color=COLOR_MUTED)

    page.text_right(X_RIGHT, COMPANY_Y, "INVOICE", FONT_SIZE_TITLE, bold=True)
    page.text_right(X_RIGHT, TAGLINE_Y, f"Invoice #: {layout.invoice_number}", FONT_SIZE_NORMAL)

    page.text(X_LEFT, INFO_Y, f"Invoice Date: {layout.invoice_date}", FONT_SIZE_NORMAL)
    page.text(X_LEFT, INFO_Y + INFO_LINE_H, f"Order Status: {layout.order_status}", FONT_SIZE_NORMAL)


def _draw_addresses(page: _InvoicePage, layout: InvoiceLayout) -> None:
    blocks = ((X_LEFT, "BILL TO", layout.bill_to), (X_SHIP_TO, "SHIP TO", layout.ship_to))
    for x, label, lines in blocks:
        page.text(x, ADDRESS_LABEL_Y, label, FONT_SIZE_NORMAL, bold=True)
        for index, line in enumerate(lines, start=1):
            page.text(x, ADDRESS_LABEL_Y + index * ADDRESS_LINE_H, line, FONT_SIZE_TABLE)


def _draw_items(page: _InvoicePage, layout: InvoiceLayout) -> float:
    y = TABLE_TOP_Y
    page.text(X_LEFT, y, "Product", FONT_SIZE_TABLE, bold=True)
    page.text(X_QTY, y, "Quantity", FONT_SIZE_TABLE, bold=True)
    page.text_right(X_UNIT_PRICE_RIGHT, y, "Unit Price", FONT_SIZE_TABLE, bold=True)
    page.text_right(X_RIGHT, y, "Total", FONT_SIZE_TABLE, bold=True)
    page.rule(y + 6)

    y += ITEM_ROW_H + 4
    for row in layout.rows:
        page.text(X_LEFT, y, page.clipped(row.name, FONT_SIZE_TABLE, NAME_COLUMN_W), FONT_SIZE_TABLE)
        page.text(X_QTY, y, row.quantity, FONT_SIZE_TABLE)
        page.text_right(X_UNIT_PRICE_RIGHT, y, row.unit_price, FONT_SIZE_TABLE)
        page.text_right(X_RIGHT, y, row.line_total, FONT_SIZE_TABLE)
        y += ITEM_ROW_H

    page.rule(y - ITEM_ROW_H + 8)
    return y


def _draw_totals(page: _InvoicePage, layout: InvoiceLayout, y: float) -> None:
    lines = (
        ("Subtotal", layout.subtotal_text),
        ("Shipping", format_money(layout.shipping)),
        ("Tax", format_money(layout.tax)),
    )
    for label, value in lines:
        page.text_right(X_TOTALS_LABEL_RIGHT, y, label, FONT_SIZE_NORMAL)
        page.text_right(X_RIGHT, y, value, FONT_SIZE_NORMAL)
        y += TOTAL_ROW_H

    page.rule(y - TOTAL_ROW_H + 6)
    y += 4
    page.text_right(X_TOTALS_LABEL_RIGHT, y, "TOTAL DUE", FONT_SIZE_NORMAL, bold=True)
    page.text_right(X_RIGHT, y, layout.total_due_text, FONT_SIZE_NORMAL, bold=True)


def render_invoice(order: Any) -> bytes:
    """
    Render an invoice PDF for an order

    Args:
        order: OrderSnapshot, ORM Order or mapping with camelCase or snake_case keys

    Returns:
        PDF document bytes

    Raises:
        RenderError: If the order is malformed or the layout step fails
    """
    layout = build_invoice_layout(order)

    try:
        pdf = FPDF(unit="pt", format=PAGE_FORMAT)
        pdf.set_auto_page_break(False)
        pdf.set_compression(False)
        pdf.creation_date = layout.issued_at
        pdf.set_title(_latin1(f"Invoice {layout.invoice_number}"))
        pdf.set_author(_latin1(layout.company_name))
        pdf.add_page()

        page = _InvoicePage(pdf)
        _draw_header(page, layout)
        _draw_addresses(page, layout)
        y = _draw_items(page, layout)
        _draw_totals(page, layout, y)
        page.text(X_LEFT, FOOTER_Y, FOOTER_TEXT, FONT_SIZE_FOOTER, color=COLOR_MUTED)

        return bytes(pdf.output())
    except Exception as e:
        raise RenderError(f"layout failed: {e}") from e
