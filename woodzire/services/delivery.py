from datetime import date, datetime, timedelta

# transit days per carrier
CARRIER_ESTIMATES = {
    "Delhivery": {"domestic": 4, "international": 12},
    "BlueDart": {"domestic": 3, "international": 10},
    "DTDC": {"domestic": 5, "international": 14},
    "FedEx": {"domestic": 3, "international": 7},
    "DHL": {"domestic": 3, "international": 5},
    "India Post": {"domestic": 7, "international": 21},
    "Ecom Express": {"domestic": 4, "international": 15},
    "Xpressbees": {"domestic": 4, "international": 14},
    "Shadowfax": {"domestic": 3, "international": 12},
    "Standard Shipping": {"domestic": 5, "international": 15},
}
DEFAULT_CARRIER = "Standard Shipping"
AVAILABLE_CARRIERS = list(CARRIER_ESTIMATES)

METRO_CITIES = [
    "Mumbai", "Delhi", "Bangalore", "Bengaluru", "Chennai", "Kolkata",
    "Hyderabad", "Pune", "Ahmedabad", "Jaipur", "Lucknow", "Chandigarh",
]

REMOTE_STATES = [
    "Jammu and Kashmir", "Ladakh", "Arunachal Pradesh", "Sikkim",
    "Meghalaya", "Mizoram", "Nagaland", "Manipur", "Tripura",
    "Andaman and Nicobar Islands", "Lakshadweep",
]


def transit_days(carrier_name: str = DEFAULT_CARRIER, city: str = "", state: str = "", country: str = "India") -> int:
    """
    Carrier transit time adjusted for destination.

    Domestic metro cities ship a day faster (minimum 1), remote states take
    three extra days. International uses the carrier's flat figure.
    """
    carrier = CARRIER_ESTIMATES.get(carrier_name) or CARRIER_ESTIMATES[DEFAULT_CARRIER]
    domestic = (country or "India").strip().lower() == "india"
    days = carrier["domestic"] if domestic else carrier["international"]
    if domestic:
        city_l, state_l = (city or "").lower(), (state or "").lower()
        if any(m.lower() in city_l for m in METRO_CITIES):
            days = max(1, days - 1)
        elif any(r.lower() in state_l for r in REMOTE_STATES):
            days += 3
    return days


def add_working_days(start: date, days: int) -> date:
    """Add days skipping Sundays; couriers don't deliver on Sunday."""
    d, added = start, 0
    while added < days:
        d += timedelta(days=1)
        if d.weekday() != 6:
            added += 1
    return d


def estimate_delivery(carrier_name: str = DEFAULT_CARRIER, city: str = "", state: str = "",
                      country: str = "India", prep_time_days: int = 0, is_made_to_order: bool = False,
                      today: date = None) -> date:
    prep = (prep_time_days or 7) if is_made_to_order else 1
    total = prep + transit_days(carrier_name, city, state, country)
    return add_working_days(today or datetime.utcnow().date(), total)


def estimate_for_order(order, carrier_name: str = None, today: date = None) -> date:
    addr = order.shipping_address or {}
    return estimate_delivery(carrier_name or order.carrier_name or DEFAULT_CARRIER,
                             city=addr.get("city", ""), state=addr.get("state", ""),
                             country=addr.get("country", "India"), today=today)


def delivery_range(est: date):
    """Storefront shows a two-day window starting at the estimate."""
    return est, est + timedelta(days=2)
