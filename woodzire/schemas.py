"""
Request and response models for the storefront and admin API.

Request models carry the field-level validation the checkout and admin forms
rely on; response models read straight off the SQLAlchemy rows.
"""
from datetime import date, datetime, timezone
from typing import List, Optional, Dict, Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator


class ORMModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


def naive_utc(v):
    # stored datetimes are naive UTC
    if isinstance(v, datetime) and v.tzinfo is not None:
        return v.astimezone(timezone.utc).replace(tzinfo=None)
    return v


# Catalog

class ProductIn(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    price: float = Field(..., ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    category: str = Field(..., min_length=1)
    wood_type: Optional[str] = None
    description: Optional[str] = None
    care_instructions: Optional[str] = None
    shipping_info: Optional[str] = None
    stock_quantity: int = Field(0, ge=0)
    low_stock_threshold: int = Field(5, ge=0)
    is_on_sale: bool = False
    discount_percentage: float = Field(0, ge=0, le=100)
    is_made_to_order: bool = False
    prep_time_days: int = Field(7, ge=0)
    estimated_delivery_days: Optional[int] = Field(None, ge=0)
    delivery_charge: float = Field(0, ge=0)
    international_delivery_charge: float = Field(0, ge=0)
    is_active: bool = True
    is_featured: bool = False
    is_trending: bool = False
    images: List[str] = Field(default_factory=list)
    dimensions: Optional[Dict[str, Any]] = None


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    compare_at_price: Optional[float] = Field(None, ge=0)
    category: Optional[str] = Field(None, min_length=1)
    wood_type: Optional[str] = None
    description: Optional[str] = None
    care_instructions: Optional[str] = None
    shipping_info: Optional[str] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(None, ge=0)
    is_on_sale: Optional[bool] = None
    discount_percentage: Optional[float] = Field(None, ge=0, le=100)
    is_made_to_order: Optional[bool] = None
    prep_time_days: Optional[int] = Field(None, ge=0)
    estimated_delivery_days: Optional[int] = Field(None, ge=0)
    delivery_charge: Optional[float] = Field(None, ge=0)
    international_delivery_charge: Optional[float] = Field(None, ge=0)
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_trending: Optional[bool] = None
    images: Optional[List[str]] = None
    dimensions: Optional[Dict[str, Any]] = None


class ProductOut(ORMModel):
    id: int
    name: str
    slug: str
    price: float
    compare_at_price: Optional[float] = None
    category: str
    wood_type: Optional[str] = None
    description: Optional[str] = None
    stock_quantity: int
    low_stock_threshold: Optional[int] = None
    is_on_sale: Optional[bool] = None
    discount_percentage: Optional[float] = None
    is_made_to_order: Optional[bool] = None
    prep_time_days: Optional[int] = None
    is_active: Optional[bool] = None
    is_featured: Optional[bool] = None
    is_trending: Optional[bool] = None
    images: Optional[List[str]] = None
    dimensions: Optional[Dict[str, Any]] = None
    effective_price: Optional[float] = None


class RestockRequest(BaseModel):
    quantity: int = Field(..., gt=0)


class CategoryIn(BaseModel):
    name: str = Field(..., min_length=1)
    slug: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool = True
    sort_order: int = 0


class CategoryOut(ORMModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    sort_order: Optional[int] = None


class BundleLine(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class BundleIn(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    discount_percentage: float = Field(0, ge=0, le=100)
    is_active: bool = True
    items: List[BundleLine] = Field(default_factory=list)


# Checkout

class CartLine(BaseModel):
    product_id: int
    quantity: int = Field(1, ge=1)


class QuoteRequest(BaseModel):
    items: List[CartLine] = Field(..., min_length=1)
    country: str = "India"
    gift_card_code: Optional[str] = None


class CheckoutRequest(BaseModel):
    full_name: str = Field(..., min_length=2)
    email: EmailStr
    phone: str = Field(..., min_length=10)
    street_address: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    postal_code: str = Field(..., min_length=5)
    country: str = "India"
    notes: Optional[str] = None
    items: List[CartLine] = Field(..., min_length=1)
    gift_card_code: Optional[str] = None

    def address(self) -> dict:
        return {"street_address": self.street_address, "city": self.city, "state": self.state,
                "postal_code": self.postal_code, "country": self.country}


# Orders

class OrderItemOut(ORMModel):
    id: int
    product_id: Optional[int] = None
    product_name: str
    product_image: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float


class StatusHistoryOut(ORMModel):
    id: int
    status: str
    changed_by: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime


class OrderOut(ORMModel):
    id: int
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: Optional[str] = None
    shipping_address: Dict[str, Any]
    subtotal: float
    shipping_cost: float
    tax: float
    gift_card_discount: float
    total: float
    status: str
    tracking_number: Optional[str] = None
    carrier_name: Optional[str] = None
    est_delivery_date: Optional[date] = None
    cancellation_reason: Optional[str] = None
    refund_amount: Optional[float] = None
    refund_method: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    items: List[OrderItemOut] = Field(default_factory=list)


class TrackedOrderOut(OrderOut):
    history: List[StatusHistoryOut] = Field(default_factory=list)


class ShipRequest(BaseModel):
    tracking_number: str = ""
    carrier_name: str = ""
    est_delivery_date: Optional[date] = None
    notes: Optional[str] = None


class CancelRequest(BaseModel):
    reason: str = ""
    refund_amount: Optional[float] = Field(None, ge=0)
    refund_method: Optional[str] = None


class StatusUpdate(BaseModel):
    status: Literal["pending", "preparing", "shipped", "delivered", "cancelled"]
    force: bool = False
    notes: Optional[str] = None
    tracking_number: Optional[str] = None
    carrier_name: Optional[str] = None
    est_delivery_date: Optional[date] = None
    cancellation_reason: Optional[str] = None


class ShippingCostUpdate(BaseModel):
    shipping_cost: float = Field(..., ge=0)


# Gift cards

class GiftCardIn(BaseModel):
    amount: float = Field(..., gt=0)
    purchaser_email: Optional[EmailStr] = None
    recipient_email: Optional[EmailStr] = None
    recipient_name: Optional[str] = None
    message: Optional[str] = None
    is_public: bool = False
    usage_limit: Optional[int] = Field(None, ge=1)
    expires_at: Optional[datetime] = None

    @field_validator("expires_at")
    @classmethod
    def utc_expiry(cls, v):
        return naive_utc(v)


class GiftCardOut(ORMModel):
    id: int
    code: str
    initial_balance: float
    current_balance: float
    currency: str
    purchaser_email: Optional[str] = None
    recipient_email: Optional[str] = None
    recipient_name: Optional[str] = None
    is_active: bool
    is_public: Optional[bool] = None
    usage_limit: Optional[int] = None
    usage_count: Optional[int] = None
    expires_at: Optional[datetime] = None
    used_at: Optional[datetime] = None
    created_at: datetime


class GiftCardValidateRequest(BaseModel):
    code: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0)


# Promotions

class ScheduledSaleIn(BaseModel):
    name: str = Field(..., min_length=1)
    discount_percentage: float = Field(..., gt=0, le=100)
    sale_type: Literal["all", "category", "products"] = "all"
    target_category: Optional[str] = None
    target_product_ids: Optional[List[int]] = None
    start_date: datetime
    end_date: datetime
    is_active: bool = True
    is_paused: bool = False

    @field_validator("start_date", "end_date")
    @classmethod
    def utc_window(cls, v):
        return naive_utc(v)

    @model_validator(mode="after")
    def check_window_and_target(self):
        if self.end_date <= self.start_date:
            raise ValueError("end_date must be after start_date")
        if self.sale_type == "category" and not self.target_category:
            raise ValueError("target_category is required for a category sale")
        if self.sale_type == "products" and not self.target_product_ids:
            raise ValueError("target_product_ids is required for a products sale")
        return self


class ScheduledSaleOut(ORMModel):
    id: int
    name: str
    discount_percentage: float
    sale_type: str
    target_category: Optional[str] = None
    target_product_ids: Optional[List[int]] = None
    start_date: datetime
    end_date: datetime
    is_active: bool
    is_paused: bool
    status: Optional[str] = None


class SaleApplyRequest(BaseModel):
    product_ids: List[int] = Field(..., min_length=1)
    discount_percentage: float = Field(..., gt=0, le=100)


class SaleRemoveRequest(BaseModel):
    product_ids: Optional[List[int]] = None


class BannerIn(BaseModel):
    message: str = Field(..., min_length=1)
    link: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    is_active: bool = True
    is_sticky: bool = False
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @field_validator("start_date", "end_date")
    @classmethod
    def utc_window(cls, v):
        return naive_utc(v)


class BannerOut(ORMModel):
    id: int
    message: str
    link: Optional[str] = None
    background_color: Optional[str] = None
    text_color: Optional[str] = None
    is_active: bool
    is_sticky: bool
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


# Settings

class PaymentSettingsIn(BaseModel):
    cod_enabled: Optional[bool] = None
    upi_enabled: Optional[bool] = None
    razorpay_enabled: Optional[bool] = None
    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    upi_id: Optional[str] = None
    gst_percentage: Optional[float] = Field(None, ge=0, le=100)
    domestic_shipping_threshold: Optional[float] = Field(None, ge=0)
    domestic_shipping_charge: Optional[float] = Field(None, ge=0)
    international_shipping_charge: Optional[float] = Field(None, ge=0)


# Engagement

class TestimonialIn(BaseModel):
    name: str = Field(..., min_length=1)
    location: Optional[str] = None
    product: Optional[str] = None
    rating: int = Field(5, ge=1, le=5)
    text: str = Field(..., min_length=1)
    is_active: bool = True
    is_featured: bool = False


class TestimonialOut(ORMModel):
    id: int
    name: str
    location: Optional[str] = None
    product: Optional[str] = None
    rating: int
    text: str
    is_active: bool
    is_featured: bool


class ReviewIn(BaseModel):
    product_id: int
    customer_name: str = Field(..., min_length=1)
    customer_email: EmailStr
    rating: int = Field(..., ge=1, le=5)
    title: Optional[str] = None
    content: str = Field(..., min_length=1)


class ReviewOut(ORMModel):
    id: int
    product_id: int
    customer_name: str
    rating: int
    title: Optional[str] = None
    content: str
    is_approved: bool
    is_featured: bool
    created_at: datetime


class ReviewModeration(BaseModel):
    is_approved: Optional[bool] = None
    is_featured: Optional[bool] = None


class InquiryIn(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    product: Optional[str] = None
    message: str = Field(..., min_length=1)


class InquiryOut(ORMModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    product: Optional[str] = None
    message: str
    is_read: bool
    created_at: datetime


class StockAlertIn(BaseModel):
    product_id: int
    email: EmailStr


# Customer accounts

class WishlistIn(BaseModel):
    product_id: int


class AddressIn(BaseModel):
    label: str = "Home"
    full_name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=10)
    street_address: str = Field(..., min_length=5)
    city: str = Field(..., min_length=2)
    state: str = Field(..., min_length=2)
    postal_code: str = Field(..., min_length=5)
    country: str = "India"
    is_default: bool = False


class AddressOut(ORMModel):
    id: int
    label: Optional[str] = None
    full_name: str
    phone: str
    street_address: str
    city: str
    state: str
    postal_code: str
    country: str
    is_default: bool


class EmailPreferencesIn(BaseModel):
    order_updates: Optional[bool] = None
    shipping_notifications: Optional[bool] = None
    promotional_emails: Optional[bool] = None
    back_in_stock_alerts: Optional[bool] = None
    newsletter: Optional[bool] = None


class EmailPreferencesOut(ORMModel):
    order_updates: bool
    shipping_notifications: bool
    promotional_emails: bool
    back_in_stock_alerts: bool
    newsletter: bool


class AbandonedCartIn(BaseModel):
    email: EmailStr
    items: List[CartLine] = Field(..., min_length=1)


class AbandonedCartOut(ORMModel):
    id: int
    user_email: str
    cart_items: List[Dict[str, Any]]
    total_amount: float
    reminder_sent_count: int
    last_reminder_sent_at: Optional[datetime] = None
    recovered: bool
    created_at: datetime


# Admin

class ManualOrderRequest(CheckoutRequest):
    notify_customer: bool = False


class UserOut(ORMModel):
    id: int
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    role: str
    created_at: datetime


class RoleUpdate(BaseModel):
    role: Literal["admin", "moderator", "user"]


class CampaignContent(BaseModel):
    headline: str = Field(..., min_length=1)
    body: str = Field(..., min_length=1)
    cta_text: Optional[str] = None
    cta_url: Optional[str] = None
    image_url: Optional[str] = None


class CampaignRequest(BaseModel):
    subject: str = Field(..., min_length=1)
    template: Literal["promotional", "newsletter", "announcement"] = "promotional"
    content: CampaignContent
    test_email: Optional[EmailStr] = None
