from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from woodzire.db.base import Base

class GiftCard(Base):
    __tablename__ = "gift_cards"
    id = Column(Integer, primary_key=True)
    code = Column(String, unique=True, index=True, nullable=False)
    initial_balance = Column(Float, nullable=False)
    current_balance = Column(Float, nullable=False)
    currency = Column(String, default="INR")
    purchaser_email = Column(String, nullable=True)
    recipient_email = Column(String, nullable=True)
    recipient_name = Column(String, nullable=True)
    message = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True)
    is_public = Column(Boolean, default=False)
    usage_limit = Column(Integer, nullable=True)
    usage_count = Column(Integer, default=0)
    expires_at = Column(DateTime, nullable=True)
    used_at = Column(DateTime, nullable=True)
    created_by = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    transactions = relationship("GiftCardTransaction", back_populates="gift_card")

class GiftCardTransaction(Base):
    __tablename__ = "gift_card_transactions"
    id = Column(Integer, primary_key=True)
    gift_card_id = Column(Integer, ForeignKey("gift_cards.id"), index=True, nullable=False)
    order_id = Column(Integer, nullable=True)
    amount = Column(Float, nullable=False)
    transaction_type = Column(String, nullable=False)  # purchase | redemption | refund
    created_at = Column(DateTime, default=datetime.utcnow)
    gift_card = relationship("GiftCard", back_populates="transactions")
