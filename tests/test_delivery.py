from datetime import date, datetime
from types import SimpleNamespace

from woodzire.services import delivery

MONDAY = date(2024, 1, 1)


def test_working_days_skip_sunday():
    # Sat 6th -> Mon 8th
    assert delivery.add_working_days(date(2024, 1, 6), 1) == date(2024, 1, 8)
    assert delivery.add_working_days(MONDAY, 6) == date(2024, 1, 8)


def test_metro_city_is_a_day_faster():
    assert delivery.transit_days("Standard Shipping", city="Mumbai") == 4
    assert delivery.transit_days("Standard Shipping", city="Nashik", state="Maharashtra") == 5


def test_remote_state_adds_three_days():
    assert delivery.transit_days("BlueDart", city="Gangtok", state="Sikkim") == 6


def test_unknown_carrier_falls_back_to_standard():
    assert delivery.transit_days("Pigeon Post") == 5


def test_international_uses_carrier_figure():
    assert delivery.transit_days("DHL", city="Mumbai", country="Germany") == 5


def test_estimate_for_ready_stock():
    assert delivery.estimate_delivery(city="Mumbai", today=MONDAY) == date(2024, 1, 6)
    assert delivery.estimate_delivery(state="Sikkim", today=MONDAY) == date(2024, 1, 11)


def test_estimate_for_made_to_order():
    est = delivery.estimate_delivery("DHL", country="Germany", prep_time_days=10, is_made_to_order=True,
                                     today=MONDAY)
    assert est == date(2024, 1, 18)


def test_estimate_for_order_reads_address():
    order = SimpleNamespace(shipping_address={"city": "Bengaluru", "state": "Karnataka", "country": "India"},
                            carrier_name=None)
    assert delivery.estimate_for_order(order, "FedEx", today=MONDAY) == delivery.add_working_days(MONDAY, 3)


def test_delivery_range_is_two_days():
    early, late = delivery.delivery_range(MONDAY)
    assert (late - early).days == 2


def test_default_today_is_utc(monkeypatch):
    class FrozenDatetime(datetime):
        @classmethod
        def utcnow(cls):
            return datetime(2024, 1, 1, 23, 30)

    monkeypatch.setattr(delivery, "datetime", FrozenDatetime)
    assert delivery.estimate_delivery(city="Mumbai") == date(2024, 1, 6)
