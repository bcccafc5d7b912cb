import logging
from datetime import datetime

from sqlalchemy.orm import Session
from sqlalchemy import or_

from woodzire.models.catalog import Product
from woodzire.models.promotions import ScheduledSale, PromotionalBanner
from woodzire.services.pricing import round_half_up

logger = logging.getLogger(__name__)


def _in_window(sale, now):
    return sale.start_date <= now < sale.end_date


def is_live(sale, now: datetime = None) -> bool:
    now = now or datetime.utcnow()
    return bool(sale.is_active) and not sale.is_paused and _in_window(sale, now)


def is_upcoming(sale, now: datetime = None) -> bool:
    return sale.start_date > (now or datetime.utcnow())


def is_past(sale, now: datetime = None) -> bool:
    return sale.end_date < (now or datetime.utcnow())


def classify_sales(sales, now: datetime = None) -> dict:
    """
    Bucket scheduled sales for the admin Sales tab.

    live/upcoming/past are date based; "paused" is a separate bucket that
    overlaps them, so a paused sale inside its window shows up under
    "paused" only and a paused future sale shows up under both "upcoming"
    and "paused".
    """
    now = now or datetime.utcnow()
    buckets = {"live": [], "upcoming": [], "past": [], "paused": []}
    for s in sales:
        if is_live(s, now):
            buckets["live"].append(s)
        if is_upcoming(s, now):
            buckets["upcoming"].append(s)
        if is_past(s, now):
            buckets["past"].append(s)
        if s.is_paused:
            buckets["paused"].append(s)
    return buckets


def sale_status(sale, now: datetime = None) -> str:
    now = now or datetime.utcnow()
    if sale.is_paused:
        return "paused"
    if is_live(sale, now):
        return "live"
    if is_upcoming(sale, now):
        return "upcoming"
    if is_past(sale, now):
        return "past"
    return "inactive"


def sale_targets(sale, product) -> bool:
    if sale.sale_type == "all":
        return True
    if sale.sale_type == "category":
        return bool(sale.target_category) and sale.target_category == product.category
    if sale.sale_type == "products":
        return product.id in (sale.target_product_ids or [])
    return False


def live_sales(db: Session, now: datetime = None):
    now = now or datetime.utcnow()
    candidates = db.query(ScheduledSale).filter(
        ScheduledSale.is_active == True,  # noqa: E712
        ScheduledSale.is_paused == False,  # noqa: E712
        ScheduledSale.start_date <= now,
        ScheduledSale.end_date > now,
    ).all()
    return candidates


def effective_discount(product, sales=(), now: datetime = None) -> float:
    """Largest of the product's own sale flag and any live scheduled sale targeting it."""
    now = now or datetime.utcnow()
    own = float(product.discount_percentage or 0) if product.is_on_sale else 0.0
    scheduled = [float(s.discount_percentage) for s in sales if is_live(s, now) and sale_targets(s, product)]
    return max([own] + scheduled)


def effective_price(product, sales=(), now: datetime = None) -> int:
    d = effective_discount(product, sales, now)
    if d <= 0:
        return round_half_up(product.price)
    return round_half_up(product.price * (1 - d / 100))


def apply_sale(db: Session, product_ids, discount_percentage: float) -> int:
    """The admin "Apply Sale" action: flag products as on sale with a fixed discount."""
    n = db.query(Product).filter(Product.id.in_(product_ids)).update(
        {Product.is_on_sale: True, Product.discount_percentage: discount_percentage},
        synchronize_session=False,
    )
    logger.info("Applied %s%% sale to %d products", discount_percentage, n)
    return n


def remove_sale(db: Session, product_ids=None) -> int:
    q = db.query(Product).filter(Product.is_on_sale == True)  # noqa: E712
    if product_ids:
        q = q.filter(Product.id.in_(product_ids))
    n = q.update({Product.is_on_sale: False, Product.discount_percentage: 0}, synchronize_session=False)
    logger.info("Removed sale from %d products", n)
    return n


def apply_scheduled_sale(db: Session, sale: ScheduledSale) -> int:
    """Copy a scheduled sale's discount onto the products it targets."""
    targets = [p.id for p in db.query(Product).all() if sale_targets(sale, p)]
    if not targets:
        return 0
    return apply_sale(db, targets, sale.discount_percentage)


def active_banner(db: Session, now: datetime = None):
    now = now or datetime.utcnow()
    return (db.query(PromotionalBanner)
              .filter(PromotionalBanner.is_active == True)  # noqa: E712
              .filter(or_(PromotionalBanner.start_date.is_(None), PromotionalBanner.start_date <= now))
              .filter(or_(PromotionalBanner.end_date.is_(None), PromotionalBanner.end_date >= now))
              .order_by(PromotionalBanner.created_at.desc(), PromotionalBanner.id.desc())
              .first())
