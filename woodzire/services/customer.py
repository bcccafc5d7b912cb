import logging
from datetime import datetime

from sqlalchemy.orm import Session

from woodzire.models.customer import Address, AbandonedCart, EmailPreference
from woodzire.models.user import User
from woodzire.services import orders as order_service

logger = logging.getLogger(__name__)

EMAIL_PREFERENCE_FIELDS = ("order_updates", "shipping_notifications", "promotional_emails",
                           "back_in_stock_alerts", "newsletter")


# Addresses

def save_address(db: Session, user_id: int, data: dict, address: Address = None) -> Address:
    """Create or update an address; a new default clears the flag on the user's others."""
    if address is None:
        address = Address(user_id=user_id)
        db.add(address)
    for k, v in data.items():
        setattr(address, k, v)
    if address.is_default:
        db.flush()
        (db.query(Address)
           .filter(Address.user_id == user_id, Address.id != address.id)
           .update({Address.is_default: False}, synchronize_session=False))
    return address


def default_address(db: Session, user_id: int):
    return (db.query(Address).filter(Address.user_id == user_id)
              .order_by(Address.is_default.desc(), Address.created_at.desc()).first())


# Abandoned carts

def save_abandoned_cart(db: Session, email: str, cart_lines, user_id: int = None, now: datetime = None) -> AbandonedCart:
    """
    Snapshot a cart the customer walked away from.

    Lines are priced against the catalog like checkout does. One open cart is
    kept per e-mail: a later save replaces its contents.
    """
    lines = order_service.price_cart(db, cart_lines, now)
    items = [{"product_id": l["product_id"], "name": l["product"].name, "price": l["unit_price"],
              "quantity": l["quantity"], "image": l["product"].cover_image} for l in lines]
    total = sum(l["unit_price"] * l["quantity"] for l in lines)
    email = email.strip().lower()
    cart = (db.query(AbandonedCart)
              .filter(AbandonedCart.user_email == email, AbandonedCart.recovered == False)  # noqa: E712
              .first())
    if cart is None:
        cart = AbandonedCart(user_email=email, reminder_sent_count=0, recovered=False)
        db.add(cart)
    cart.user_id = user_id or cart.user_id
    cart.cart_items = items
    cart.total_amount = total
    return cart


def mark_cart_recovered(db: Session, email: str) -> int:
    updated = (db.query(AbandonedCart)
                 .filter(AbandonedCart.user_email == email.strip().lower(),
                         AbandonedCart.recovered == False)  # noqa: E712
                 .update({AbandonedCart.recovered: True}, synchronize_session=False))
    if updated:
        logger.info("Abandoned cart for %s recovered", email)
    return updated


def record_reminder(cart: AbandonedCart, now: datetime = None) -> AbandonedCart:
    cart.reminder_sent_count = (cart.reminder_sent_count or 0) + 1
    cart.last_reminder_sent_at = now or datetime.utcnow()
    return cart


# Email preferences

def get_email_preferences(db: Session, user: User) -> EmailPreference:
    prefs = db.query(EmailPreference).filter(EmailPreference.user_id == user.id).first()
    if prefs is None:
        prefs = EmailPreference(user_id=user.id, user_email=user.email.lower(), order_updates=True,
                                shipping_notifications=True, promotional_emails=False,
                                back_in_stock_alerts=True, newsletter=False)
        db.add(prefs)
    return prefs


def opted_out(db: Session, emails, field: str) -> set:
    """E-mails among `emails` whose owner switched `field` off."""
    if not emails:
        return set()
    rows = (db.query(EmailPreference.user_email)
              .filter(EmailPreference.user_email.in_([e.lower() for e in emails]),
                      getattr(EmailPreference, field) == False)  # noqa: E712
              .all())
    return {r.user_email for r in rows}


# Email campaigns

CAMPAIGN_BATCH_SIZE = 50

# which preference a campaign template is gated on; announcements reach everyone with a preferences row
CAMPAIGN_AUDIENCE = {"promotional": "promotional_emails", "newsletter": "newsletter", "announcement": None}


def campaign_recipients(db: Session, template: str) -> list:
    q = db.query(EmailPreference.user_email)
    field = CAMPAIGN_AUDIENCE[template]
    if field:
        q = q.filter(getattr(EmailPreference, field) == True)  # noqa: E712
    return [r.user_email for r in q.order_by(EmailPreference.id).all()]


def batched(recipients, size: int = CAMPAIGN_BATCH_SIZE):
    return [recipients[i:i + size] for i in range(0, len(recipients), size)]
