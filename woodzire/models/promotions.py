from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, JSON
from datetime import datetime
from woodzire.db.base import Base

class ScheduledSale(Base):
    __tablename__ = "scheduled_sales"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    discount_percentage = Column(Float, nullable=False)
    sale_type = Column(String, default="all")
    target_category = Column(String, nullable=True)
    target_product_ids = Column(JSON, nullable=True)
    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=True)
    is_paused = Column(Boolean, default=False)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class PromotionalBanner(Base):
    __tablename__ = "promotional_banners"
    id = Column(Integer, primary_key=True)
    message = Column(Text, nullable=False)
    link = Column(String, nullable=True)
    background_color = Column(String, nullable=True)
    text_color = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    is_sticky = Column(Boolean, default=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
