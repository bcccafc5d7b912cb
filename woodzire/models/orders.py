from sqlalchemy import Column, Integer, String, Float, DateTime, Date, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from woodzire.db.base import Base

ORDER_STATUSES = ("pending", "preparing", "shipped", "delivered", "cancelled")

class Order(Base):
    __tablename__ = "orders"
    id = Column(Integer, primary_key=True)
    order_number = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(Integer, nullable=True, index=True)
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, index=True, nullable=False)
    customer_phone = Column(String, nullable=True)
    shipping_address = Column(JSON, nullable=False)
    billing_address = Column(JSON, nullable=True)
    subtotal = Column(Float, nullable=False)
    shipping_cost = Column(Float, default=0)
    tax = Column(Float, default=0)
    gift_card_discount = Column(Float, default=0)
    total = Column(Float, nullable=False)
    status = Column(String, default="pending", index=True)
    tracking_number = Column(String, nullable=True)
    carrier_name = Column(String, nullable=True)
    est_delivery_date = Column(Date, nullable=True)
    cancellation_reason = Column(Text, nullable=True)
    refund_amount = Column(Float, nullable=True)
    refund_method = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    items = relationship("OrderItem", back_populates="order", cascade="all, delete-orphan")
    history = relationship("OrderStatusHistory", back_populates="order",
                           order_by="OrderStatusHistory.id", cascade="all, delete-orphan")

class OrderItem(Base):
    __tablename__ = "order_items"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    product_id = Column(Integer, nullable=True)  # snapshot survives product deletion
    product_name = Column(String, nullable=False)
    product_image = Column(String, nullable=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Float, nullable=False)
    total_price = Column(Float, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    order = relationship("Order", back_populates="items")

class OrderStatusHistory(Base):
    __tablename__ = "order_status_history"
    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id"), index=True, nullable=False)
    status = Column(String, nullable=False)
    changed_by = Column(String, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    order = relationship("Order", back_populates="history")
