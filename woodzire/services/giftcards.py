import logging
import secrets
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from woodzire.models.giftcards import GiftCard, GiftCardTransaction

logger = logging.getLogger(__name__)

# no 0/O or 1/I
CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_PREFIX = "WZ"

MESSAGES = {
    "not_found": "Gift card not found",
    "inactive": "Gift card is no longer active",
    "expired": "Gift card has expired",
    "usage_limit_reached": "Gift card usage limit reached",
    "insufficient_balance": "Insufficient balance",
}


class GiftCardError(Exception):
    def __init__(self, kind: str, message: str = None):
        self.kind = kind
        self.message = message or MESSAGES.get(kind, kind)
        super().__init__(self.message)


def generate_code() -> str:
    block = lambda: "".join(secrets.choice(CODE_ALPHABET) for _ in range(4))  # noqa: E731
    return f"{CODE_PREFIX}-{block()}-{block()}"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def check_usable(card: GiftCard, now: datetime = None):
    now = now or datetime.utcnow()
    if not card.is_active:
        raise GiftCardError("inactive")
    if card.expires_at and card.expires_at < now:
        raise GiftCardError("expired")
    if card.usage_limit is not None and (card.usage_count or 0) >= card.usage_limit:
        raise GiftCardError("usage_limit_reached")


def validate(db: Session, code: str, amount: float, now: datetime = None):
    """
    Look a code up and return (card, discount) with discount = min(balance, amount).

    Nothing is reserved: the balance only moves when an order is written.
    """
    card = db.query(GiftCard).filter(GiftCard.code == normalize_code(code)).first()
    if not card:
        raise GiftCardError("not_found")
    check_usable(card, now)
    discount = min(float(card.current_balance), max(float(amount), 0.0))
    return card, discount


def create_gift_card(db: Session, amount: float, purchaser_email: str = None, recipient_email: str = None,
                     recipient_name: str = None, message: str = None, is_public: bool = False,
                     usage_limit: int = None, expires_at: datetime = None, created_by: str = None) -> GiftCard:
    code = generate_code()
    while db.query(GiftCard.id).filter(GiftCard.code == code).first():
        code = generate_code()
    card = GiftCard(code=code, initial_balance=amount, current_balance=amount,
                    purchaser_email=purchaser_email, recipient_email=recipient_email,
                    recipient_name=recipient_name, message=message, is_public=is_public,
                    usage_limit=usage_limit, usage_count=0, expires_at=expires_at,
                    created_by=created_by, is_active=True)
    db.add(card)
    db.flush()
    db.add(GiftCardTransaction(gift_card_id=card.id, amount=amount, transaction_type="purchase"))
    logger.info("Gift card %s issued for %s", card.code, amount)
    return card


def redeem(db: Session, card: GiftCard, amount: float, order_id: int = None, now: datetime = None) -> GiftCard:
    """
    Decrement the balance and write a redemption ledger row.

    The decrement is a conditional UPDATE so two checkouts racing on the same
    card cannot take the balance below zero; the loser gets
    insufficient_balance.
    """
    if amount <= 0:
        return card
    now = now or datetime.utcnow()
    updated = (db.query(GiftCard)
                 .filter(GiftCard.id == card.id, GiftCard.current_balance >= amount)
                 .update({GiftCard.current_balance: GiftCard.current_balance - amount,
                          GiftCard.usage_count: func.coalesce(GiftCard.usage_count, 0) + 1},
                         synchronize_session=False))
    if not updated:
        raise GiftCardError("insufficient_balance")
    db.refresh(card)
    if card.current_balance <= 0:
        card.current_balance = 0
        card.is_active = False
        card.used_at = now
    db.add(GiftCardTransaction(gift_card_id=card.id, order_id=order_id, amount=amount,
                               transaction_type="redemption"))
    logger.info("Gift card %s redeemed %s (order %s), balance %s", card.code, amount, order_id, card.current_balance)
    return card


def refund_order(db: Session, order_id: int, now: datetime = None):
    """Credit every redemption made for an order back to its card. Returns the amount credited."""
    now = now or datetime.utcnow()
    redemptions = (db.query(GiftCardTransaction)
                     .filter(GiftCardTransaction.order_id == order_id,
                             GiftCardTransaction.transaction_type == "redemption").all())
    credited = 0
    for tx in redemptions:
        card = tx.gift_card
        card.current_balance = (card.current_balance or 0) + tx.amount
        card.is_active = True
        card.used_at = None
        db.add(GiftCardTransaction(gift_card_id=card.id, order_id=order_id, amount=tx.amount,
                                   transaction_type="refund", created_at=now))
        logger.info("Gift card %s refunded %s (order %s), balance %s", card.code, tx.amount, order_id,
                    card.current_balance)
        credited += tx.amount
    return credited
