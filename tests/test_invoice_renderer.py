from decimal import Decimal

import pytest

from invoice_service.renderers.invoice_pdf import (
    build_invoice_layout,
    format_money,
    invoice_number,
    render_invoice,
)
from invoice_service.schemas.order import OrderSnapshot
from invoice_service.services.errors import RenderError


def test_subtotal_and_total_for_example_order(make_payload):
    layout = build_invoice_layout(make_payload())

    assert layout.subtotal == Decimal("25.50")
    assert layout.subtotal_text == "$25.50"
    assert layout.total_due_text == "$25.50"
    assert layout.shipping == Decimal("0.00")
    assert layout.tax == Decimal("0.00")


def test_total_due_comes_from_total_amount_not_items(make_payload):
    layout = build_invoice_layout(make_payload(totalAmount=30.00))

    assert layout.subtotal_text == "$25.50"
    assert layout.total_due_text == "$30.00"

    pdf = render_invoice(make_payload(totalAmount=30.00))
    assert b"$25.50" in pdf
    assert b"$30.00" in pdf


def test_subtotal_is_exact_to_the_cent(make_payload):
    items = [
        {"name": "Pen", "price": 19.99, "quantity": 3},
        {"name": "Clip", "price": 0.10, "quantity": 7},
        {"name": "Pad", "price": 1.01, "quantity": 1},
    ]
    layout = build_invoice_layout(make_payload(items=items, totalAmount=0))

    assert layout.subtotal == Decimal("61.68")
    assert layout.total_due_text == "$0.00"


def test_rows_follow_item_order(make_payload):
    layout = build_invoice_layout(make_payload())

    assert [row.name for row in layout.rows] == ["Widget", "Gadget"]
    assert [row.quantity for row in layout.rows] == ["2", "1"]
    assert [row.unit_price for row in layout.rows] == ["$10.00", "$5.50"]
    assert [row.line_total for row in layout.rows] == ["$20.00", "$5.50"]


def test_header_blocks(make_payload):
    layout = build_invoice_layout(make_payload(status="shipped"))

    assert layout.company_name == "ShopStack"
    assert layout.invoice_number == "A1B2C3D4E5F6"
    assert layout.invoice_date == "Mar 14, 2024"
    assert layout.order_status == "Shipped"
    assert layout.bill_to == ["alice@example.com", "Phone: 555-0100"]
    assert layout.ship_to == ["1 Main St", "Springfield, 12345"]


def test_invoice_number_is_truncated_and_upper_cased():
    assert invoice_number("abcdef0123456789") == "ABCDEF012345"
    assert invoice_number("short") == "SHORT"


def test_format_money_rounds_half_up():
    assert format_money(Decimal("2.005")) == "$2.01"
    assert format_money(Decimal("7")) == "$7.00"


def test_render_produces_single_page_pdf(make_payload):
    pdf = render_invoice(make_payload())

    assert pdf.startswith(b"%PDF-")
    assert b"INVOICE" in pdf
    assert b"Invoice #: A1B2C3D4E5F6" in pdf
    assert b"Thank you for your purchase!" in pdf
    assert b"/Count 1" in pdf


def test_render_is_deterministic(make_payload):
    assert render_invoice(make_payload()) == render_invoice(make_payload())


def test_long_orders_are_not_paginated(make_payload):
    items = [{"name": f"Item {i}", "price": 1.00, "quantity": 1} for i in range(60)]
    pdf = render_invoice(make_payload(items=items, totalAmount=60))

    assert b"/Count 1" in pdf


def test_accepts_snapshot_instances(make_payload):
    snapshot = OrderSnapshot.model_validate(make_payload())

    assert render_invoice(snapshot) == render_invoice(make_payload())


def test_non_latin1_text_is_replaced(make_payload):
    items = [{"name": "Widget ✓ 中", "price": 1.00, "quantity": 1}]

    pdf = render_invoice(make_payload(items=items, totalAmount=1))

    assert pdf.startswith(b"%PDF-")


@pytest.mark.parametrize("email", ["bob@shop.local", "bob@localhost", "ops@store.test"])
def test_owner_email_is_printed_as_stored(make_payload, email):
    layout = build_invoice_layout(make_payload(userEmail=email))
    pdf = render_invoice(make_payload(userEmail=email))

    assert layout.bill_to[0] == email
    assert email.encode() in pdf


def test_missing_owner_email_raises_render_error(make_payload):
    with pytest.raises(RenderError):
        render_invoice(make_payload(userEmail=""))


def test_missing_shipping_address_raises_render_error(make_payload):
    payload = make_payload()
    del payload["shippingAddress"]

    with pytest.raises(RenderError):
        render_invoice(payload)


def test_null_shipping_address_raises_render_error(make_payload):
    with pytest.raises(RenderError):
        render_invoice(make_payload(shippingAddress=None))


def test_empty_items_raise_render_error(make_payload):
    with pytest.raises(RenderError, match="no items"):
        render_invoice(make_payload(items=[]))


@pytest.mark.parametrize("item", [
    {"name": "Widget", "price": 10.00, "quantity": 0},
    {"name": "Widget", "price": "ten", "quantity": 1},
    {"price": 10.00, "quantity": 1},
])
def test_malformed_items_raise_render_error(make_payload, item):
    with pytest.raises(RenderError):
        render_invoice(make_payload(items=[item]))
