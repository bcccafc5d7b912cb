import logging
import threading

from sqlalchemy.orm import Session

from woodzire.models.settings import SiteSetting

logger = logging.getLogger(__name__)

PAYMENT_SETTINGS_KEY = "payment_settings"

DEFAULT_PAYMENT_SETTINGS = {
    "cod_enabled": False,
    "upi_enabled": True,
    "razorpay_enabled": False,
    "razorpay_key_id": "",
    "razorpay_key_secret": "",
    "upi_id": "woodzire@upi",
    "gst_percentage": 18,
    "domestic_shipping_threshold": 2000,
    "domestic_shipping_charge": 99,
    "international_shipping_charge": 999,
}

SECRET_FIELDS = ("razorpay_key_secret",)


class SiteSettingsCache:
    """Read-through cache of site_settings rows, dropped whenever an admin saves."""

    def __init__(self):
        self._values = {}
        self._generation = 0
        self._lock = threading.Lock()

    def get(self, db: Session, key: str, defaults: dict = None) -> dict:
        with self._lock:
            if key in self._values:
                return dict(self._values[key])
            generation = self._generation
        row = db.query(SiteSetting).filter(SiteSetting.key == key).first()
        merged = {**(defaults or {}), **((row.value or {}) if row else {})}
        with self._lock:
            # an invalidate during the read means the row may already be stale
            if generation == self._generation:
                self._values[key] = merged
        return dict(merged)

    def invalidate(self, key: str = None):
        with self._lock:
            self._generation += 1
            if key is None:
                self._values.clear()
            else:
                self._values.pop(key, None)


cache = SiteSettingsCache()


def get_payment_settings(db: Session) -> dict:
    return cache.get(db, PAYMENT_SETTINGS_KEY, DEFAULT_PAYMENT_SETTINGS)


def public_payment_settings(values: dict) -> dict:
    return {k: v for k, v in values.items() if k not in SECRET_FIELDS}


def save_payment_settings(db: Session, values: dict) -> dict:
    row = db.query(SiteSetting).filter(SiteSetting.key == PAYMENT_SETTINGS_KEY).first()
    merged = {**DEFAULT_PAYMENT_SETTINGS, **((row.value or {}) if row else {}), **values}
    if row:
        row.value = merged
    else:
        db.add(SiteSetting(key=PAYMENT_SETTINGS_KEY, value=merged))
    db.commit()
    cache.invalidate(PAYMENT_SETTINGS_KEY)
    logger.info("Payment settings saved")
    return merged
