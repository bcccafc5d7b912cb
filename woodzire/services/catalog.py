import logging
import re

from sqlalchemy.orm import Session

from woodzire.models.catalog import Product, ProductBundle
from woodzire.models.engagement import StockAlert
from woodzire.services import customer
from woodzire.services.pricing import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_LOW_STOCK_THRESHOLD = 5


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (name or "").lower()).strip("-")
    return slug or "product"


def unique_slug(db: Session, name: str, exclude_id: int = None) -> str:
    base = slugify(name)
    slug, n = base, 2
    while True:
        q = db.query(Product.id).filter(Product.slug == slug)
        if exclude_id:
            q = q.filter(Product.id != exclude_id)
        if not q.first():
            return slug
        slug, n = f"{base}-{n}", n + 1


def is_low_stock(product: Product) -> bool:
    return product.stock_quantity <= (product.low_stock_threshold or DEFAULT_LOW_STOCK_THRESHOLD)


def low_stock_products(db: Session):
    return [p for p in db.query(Product).order_by(Product.stock_quantity).all() if is_low_stock(p)]


def restock(db: Session, product: Product, quantity: int):
    """
    Add units to a product. Returns the e-mails of pending back-in-stock
    alerts when the product just came back from zero; those alerts are marked
    notified in the same transaction.
    """
    if quantity <= 0:
        raise ValueError("Restock quantity must be positive")
    was_out = product.stock_quantity <= 0
    product.stock_quantity += quantity
    logger.info("Restocked %s by %d to %d", product.slug, quantity, product.stock_quantity)
    if not was_out:
        return []
    alerts = db.query(StockAlert).filter(StockAlert.product_id == product.id, StockAlert.notified == False).all()  # noqa: E712
    for a in alerts:
        a.notified = True
    muted = customer.opted_out(db, [a.user_email for a in alerts], "back_in_stock_alerts")
    return [a.user_email for a in alerts if a.user_email not in muted]


def bundle_price(bundle: ProductBundle) -> dict:
    """
    FORMULA: Bundle price
    =====================
    original = sum(product price × quantity)
    price    = round_half_up(original × (1 - discount/100))
    """
    original = sum(float(i.product.price) * (i.quantity or 1) for i in bundle.items if i.product)
    price = round_half_up(original * (1 - float(bundle.discount_percentage or 0) / 100))
    return {"original_price": original, "bundle_price": price, "savings": original - price}
