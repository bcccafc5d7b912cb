import os

# must be set before woodzire.core.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["NOTIFY_FUNCTION_URL"] = ""
os.environ["ADMIN_EMAIL"] = "admin@woodzire.in"
os.environ["ADMIN_PASSWORD"] = "admin-pass-123"

from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

from woodzire.main import app
from woodzire.api.auth import seed_admin
from woodzire.core.config import settings
from woodzire.core.security import hash_password
from woodzire.db.base import Base
from woodzire.db.session import engine, SessionLocal
from woodzire.models.catalog import Product
from woodzire.models.giftcards import GiftCard
from woodzire.models.user import User
from woodzire.services import notify
from woodzire.services.site_settings import cache


@pytest.fixture(autouse=True)
def db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    cache.invalidate()
    session = SessionLocal()
    seed_admin(session)
    yield session
    session.close()
    cache.invalidate()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def admin(client):
    r = client.post("/login", data={"email": settings.ADMIN_EMAIL, "password": settings.ADMIN_PASSWORD})
    assert r.status_code == 200
    return client


@pytest.fixture
def moderator(client, db):
    db.add(User(email="mod@woodzire.in", name="Mod", hashed_password=hash_password("mod-pass-123"),
                role="moderator"))
    db.commit()
    r = client.post("/login", data={"email": "mod@woodzire.in", "password": "mod-pass-123"})
    assert r.status_code == 200
    return client


class NotifyRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, url, json=None, headers=None, timeout=None):
        self.calls.append(json)
        return FakeResponse()

    @property
    def types(self):
        return [c["type"] for c in self.calls]


class FakeResponse:
    status_code = 200

    def raise_for_status(self):
        return None


@pytest.fixture
def sent(monkeypatch):
    recorder = NotifyRecorder()
    monkeypatch.setattr(settings, "NOTIFY_FUNCTION_URL", "http://notify.test/send-order-notification")
    monkeypatch.setattr(notify.requests, "post", recorder)
    return recorder


@pytest.fixture
def make_product(db):
    counter = {"n": 0}

    def make(**kw):
        counter["n"] += 1
        data = dict(name=f"Teak Chair {counter['n']}", slug=f"teak-chair-{counter['n']}", price=1000,
                    category="Chairs", stock_quantity=10, images=["https://img.test/chair.jpg"])
        data.update(kw)
        p = Product(**data)
        db.add(p); db.commit(); db.refresh(p)
        return p
    return make


@pytest.fixture
def make_card(db):
    def make(code="WZ-TEST-CARD", balance=500, **kw):
        card = GiftCard(code=code, initial_balance=balance, current_balance=balance, is_active=True,
                        usage_count=0, **kw)
        db.add(card); db.commit(); db.refresh(card)
        return card
    return make


@pytest.fixture
def now():
    return datetime.utcnow()


@pytest.fixture
def yesterday(now):
    return now - timedelta(days=1)


@pytest.fixture
def tomorrow(now):
    return now + timedelta(days=1)


@pytest.fixture
def checkout_body():
    def build(items, **kw):
        body = {
            "full_name": "Asha Verma",
            "email": "asha@example.com",
            "phone": "9876543210",
            "street_address": "12 MG Road",
            "city": "Mumbai",
            "state": "Maharashtra",
            "postal_code": "400001",
            "country": "India",
            "items": items,
        }
        body.update(kw)
        return body
    return build
