from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, Text, JSON, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from woodzire.db.base import Base

class Category(Base):
    __tablename__ = "categories"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    image_url = Column(String, nullable=True)
    is_active = Column(Boolean, default=True)
    sort_order = Column(Integer, default=0)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

class Product(Base):
    __tablename__ = "products"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    slug = Column(String, unique=True, index=True, nullable=False)
    description = Column(Text, nullable=True)
    care_instructions = Column(Text, nullable=True)
    shipping_info = Column(Text, nullable=True)
    price = Column(Float, nullable=False)
    compare_at_price = Column(Float, nullable=True)
    category = Column(String, index=True, nullable=False)
    wood_type = Column(String, nullable=True)
    stock_quantity = Column(Integer, default=0, nullable=False)
    low_stock_threshold = Column(Integer, default=5)
    is_on_sale = Column(Boolean, default=False)
    discount_percentage = Column(Float, default=0)
    is_made_to_order = Column(Boolean, default=False)
    prep_time_days = Column(Integer, default=7)
    estimated_delivery_days = Column(Integer, nullable=True)
    delivery_charge = Column(Float, default=0)
    international_delivery_charge = Column(Float, default=0)
    is_active = Column(Boolean, default=True)
    is_featured = Column(Boolean, default=False)
    is_trending = Column(Boolean, default=False)
    images = Column(JSON, default=list)       # ordered, first one is the cover
    dimensions = Column(JSON, nullable=True)  # free-form key/value
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def cover_image(self):
        return (self.images or [None])[0]

    def __repr__(self):
        return f"<Product {self.slug}>"

class ProductBundle(Base):
    __tablename__ = "product_bundles"
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    discount_percentage = Column(Float, default=0)
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    items = relationship("BundleItem", back_populates="bundle", cascade="all, delete-orphan")

class BundleItem(Base):
    __tablename__ = "bundle_items"
    id = Column(Integer, primary_key=True)
    bundle_id = Column(Integer, ForeignKey("product_bundles.id"), index=True)
    product_id = Column(Integer, ForeignKey("products.id"), index=True)
    quantity = Column(Integer, default=1)
    bundle = relationship("ProductBundle", back_populates="items")
    product = relationship("Product")
