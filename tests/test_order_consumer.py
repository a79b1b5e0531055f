import json
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from invoice_service.consumers import order_consumer


class FakeChannel:
    def __init__(self):
        self.acked = []
        self.nacked = []

    def basic_ack(self, delivery_tag):
        self.acked.append(delivery_tag)

    def basic_nack(self, delivery_tag, requeue=True):
        self.nacked.append((delivery_tag, requeue))


@pytest.fixture
def consumer_env(monkeypatch, session_factory, store):
    monkeypatch.setattr(order_consumer, "SessionLocal", session_factory)
    monkeypatch.setattr(order_consumer, "get_artifact_store", lambda: store)
    return FakeChannel()


def deliver(channel, body, tag=1):
    if not isinstance(body, (bytes, str)):
        body = json.dumps(body)
    order_consumer.callback(channel, SimpleNamespace(delivery_tag=tag), None, body)


def order_created(order_id, event_id="evt-1"):
    return {
        "event_type": "OrderCreated",
        "event_id": event_id,
        "event_version": "1.0",
        "timestamp": "2024-03-14T10:00:00",
        "source": "order-service",
        "data": {
            "id": order_id,
            "userId": "user-1",
            "userEmail": "alice@example.com",
            "items": [{"productId": "p-1", "name": "Widget", "price": 10.0, "quantity": 2}],
            "totalAmount": 25.5,
            "shippingAddress": {"address": "1 Main St", "city": "Springfield", "zipCode": "12345", "phone": "555"},
            "status": "pending",
            "invoiceUrl": "",
        },
    }


def test_order_created_event_generates_invoice(consumer_env, make_order, reload_order):
    order = make_order()

    deliver(consumer_env, order_created(order.id))

    assert consumer_env.acked == [1]
    assert consumer_env.nacked == []
    order = reload_order(order.id)
    assert order.invoice_status == "ready"
    assert order.invoice_url.startswith("http://testserver/artifacts/invoices/")


def test_redelivery_is_harmless(consumer_env, store, make_order, reload_order):
    order = make_order()

    deliver(consumer_env, order_created(order.id), tag=1)
    first_key = reload_order(order.id).invoice_id
    deliver(consumer_env, order_created(order.id), tag=2)

    assert consumer_env.acked == [1, 2]
    order = reload_order(order.id)
    assert order.invoice_status == "ready"
    assert order.invoice_id != first_key
    assert len(list((store.base_dir / "invoices").iterdir())) == 2


def test_recorded_failure_is_acked(consumer_env, make_order, reload_order):
    order = make_order(shipping_address=None)

    deliver(consumer_env, order_created(order.id))

    assert consumer_env.acked == [1]
    assert reload_order(order.id).invoice_status == "failed"


def test_invalid_json_is_rejected(consumer_env):
    deliver(consumer_env, b"{not json")

    assert consumer_env.nacked == [(1, False)]
    assert consumer_env.acked == []


def test_unknown_event_type_is_rejected(consumer_env, make_order):
    event = order_created(make_order().id)
    event["event_type"] = "OrderStatusChanged"

    deliver(consumer_env, event)

    assert consumer_env.nacked == [(1, False)]


def test_event_without_order_id_is_rejected(consumer_env):
    event = order_created("x")
    del event["data"]["id"]

    deliver(consumer_env, event)

    assert consumer_env.nacked == [(1, False)]


def test_unknown_order_is_rejected(consumer_env):
    deliver(consumer_env, order_created("does-not-exist"))

    assert consumer_env.nacked == [(1, False)]


def test_repository_outage_is_requeued(consumer_env, make_order, monkeypatch):
    order = make_order()

    def unavailable(self, order_id):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(order_consumer.InvoiceService, "process_order_created", unavailable)

    deliver(consumer_env, order_created(order.id))

    assert consumer_env.nacked == [(1, True)]
    assert consumer_env.acked == []
