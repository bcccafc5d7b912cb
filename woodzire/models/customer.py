from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
from woodzire.db.base import Base

class WishlistItem(Base):
    __tablename__ = "wishlist"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    product_id = Column(Integer, ForeignKey("products.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    product = relationship("Product")
    __table_args__ = (UniqueConstraint('user_id', 'product_id', name='uq_wishlist_user_product'),)

class Address(Base):
    __tablename__ = "addresses"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), index=True, nullable=False)
    label = Column(String, default="Home")
    full_name = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    street_address = Column(String, nullable=False)
    city = Column(String, nullable=False)
    state = Column(String, nullable=False)
    postal_code = Column(String, nullable=False)
    country = Column(String, default="India")
    is_default = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)

class AbandonedCart(Base):
    __tablename__ = "abandoned_carts"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, nullable=True)
    user_email = Column(String, index=True, nullable=False)
    cart_items = Column(JSON, nullable=False)  # [{product_id, name, price, quantity, image}]
    total_amount = Column(Float, nullable=False)
    reminder_sent_count = Column(Integer, default=0)
    last_reminder_sent_at = Column(DateTime, nullable=True)
    recovered = Column(Boolean, default=False, index=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class EmailPreference(Base):
    __tablename__ = "email_preferences"
    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), unique=True, nullable=False)
    user_email = Column(String, nullable=False)
    order_updates = Column(Boolean, default=True)
    shipping_notifications = Column(Boolean, default=True)
    promotional_emails = Column(Boolean, default=False)
    back_in_stock_alerts = Column(Boolean, default=True)
    newsletter = Column(Boolean, default=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
