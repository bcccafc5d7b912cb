from datetime import date
from types import SimpleNamespace

from woodzire.core.config import settings
from woodzire.services import notify


def fake_order(**kw):
    data = dict(order_number="WZ20250101-ABC123", customer_name="Asha", customer_email="asha@example.com",
                customer_phone="9876543210", items=[], subtotal=1000, shipping_cost=99, tax=180, total=1279,
                shipping_address={"city": "Pune", "country": "India"}, status="pending",
                tracking_number=None, carrier_name=None, est_delivery_date=None,
                cancellation_reason=None, refund_amount=None, refund_method=None)
    data.update(kw)
    return SimpleNamespace(**data)


def test_skips_when_unconfigured(monkeypatch):
    monkeypatch.setattr(settings, "NOTIFY_FUNCTION_URL", "")
    assert notify.send_order_notification({"type": "order_created"}) is False


def test_sends_bearer_key(monkeypatch, sent):
    captured = {}

    def post(url, json=None, headers=None, timeout=None):
        captured.update(url=url, headers=headers, timeout=timeout)
        return sent(url, json=json)

    monkeypatch.setattr(settings, "NOTIFY_API_KEY", "key-1")
    monkeypatch.setattr(notify.requests, "post", post)
    assert notify.send_order_notification({"type": "order_created"}) is True
    assert captured["headers"] == {"Authorization": "Bearer key-1"}
    assert captured["timeout"] == settings.NOTIFY_TIMEOUT


def test_status_events():
    assert notify.status_event(fake_order(status="preparing")) is None
    shipped = notify.status_event(fake_order(status="shipped", tracking_number="T1", carrier_name="DHL",
                                             est_delivery_date=date(2025, 1, 9)))
    assert shipped["type"] == "status_change"
    assert shipped["order"]["est_delivery_date"] == "2025-01-09"
    cancelled = notify.status_event(fake_order(status="cancelled", cancellation_reason="Duplicate"))
    assert cancelled["type"] == "order_cancelled"
    assert cancelled["order"]["cancellation_reason"] == "Duplicate"


def test_address_fields_always_present():
    payload = notify.order_payload(fake_order())
    assert payload["shipping_address"]["street_address"] == ""
    assert payload["shipping_address"]["city"] == "Pune"
