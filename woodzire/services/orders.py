import logging
import secrets
from datetime import datetime

from sqlalchemy.orm import Session

from woodzire.models.catalog import Product
from woodzire.models.orders import Order, OrderItem, OrderStatusHistory, ORDER_STATUSES
from woodzire.services import giftcards, promotions, delivery
from woodzire.services.pricing import compute_quote, order_total
from woodzire.services.site_settings import get_payment_settings

logger = logging.getLogger(__name__)

# explicit admin actions follow this table; the manual dropdown may bypass it with force=True
TRANSITIONS = {
    "pending": ("preparing", "shipped", "cancelled"),
    "preparing": ("shipped", "cancelled"),
    "shipped": ("delivered", "cancelled"),
    "delivered": (),
    "cancelled": (),
}


class OrderError(Exception):
    status_code = 400


class EmptyCart(OrderError):
    pass


class ProductUnavailable(OrderError):
    status_code = 404


class OutOfStock(OrderError):
    status_code = 409


class InvalidTransition(OrderError):
    pass


class MissingTrackingInfo(OrderError):
    pass


class MissingCancellationReason(OrderError):
    pass


def generate_order_number(now: datetime = None) -> str:
    now = now or datetime.utcnow()
    return f"WZ{now:%Y%m%d}-{secrets.token_hex(3).upper()}"


def unique_order_number(db: Session, now: datetime = None) -> str:
    number = generate_order_number(now)
    while db.query(Order.id).filter(Order.order_number == number).first():
        number = generate_order_number(now)
    return number


def price_cart(db: Session, cart_lines, now: datetime = None):
    """
    Resolve cart lines against the catalog.

    Unit prices come from the current effective product price, never from the
    client.
    """
    now = now or datetime.utcnow()
    if not cart_lines:
        raise EmptyCart("Cart is empty")
    sales = promotions.live_sales(db, now)
    priced = []
    for line in cart_lines:
        product = db.query(Product).filter(Product.id == line["product_id"]).first()
        if not product or not product.is_active:
            raise ProductUnavailable(f"Product {line['product_id']} is not available")
        priced.append({
            "product": product,
            "product_id": product.id,
            "quantity": int(line["quantity"]),
            "unit_price": promotions.effective_price(product, sales, now),
        })
    return priced


def quote_cart(db: Session, cart_lines, country: str, gift_card_code: str = None, now: datetime = None):
    """
    Price a cart for display. An unusable gift card is reported, not raised:
    returns (quote, gift_card_message).
    """
    lines = price_cart(db, cart_lines, now)
    pay = get_payment_settings(db)
    balance, message = 0, None
    if gift_card_code:
        try:
            card, _ = giftcards.validate(db, gift_card_code, float("inf"), now)
            balance = card.current_balance
        except giftcards.GiftCardError as e:
            message = e.message
    return compute_quote(lines, country, pay, balance), message


def _take_stock(db: Session, product: Product, quantity: int):
    if product.is_made_to_order:
        return
    updated = (db.query(Product)
                 .filter(Product.id == product.id, Product.stock_quantity >= quantity)
                 .update({Product.stock_quantity: Product.stock_quantity - quantity},
                         synchronize_session=False))
    if not updated:
        raise OutOfStock(f"Not enough stock for {product.name}")


def create_order(db: Session, customer: dict, shipping_address: dict, cart_lines, gift_card_code: str = None,
                 notes: str = None, user_id: int = None, billing_address: dict = None,
                 now: datetime = None) -> Order:
    """
    Write an order with its items, stock decrements, gift-card redemption and
    first history row.

    Everything is added to the caller's session and flushed, nothing is
    committed: the caller commits once so checkout is all-or-nothing.
    """
    now = now or datetime.utcnow()
    lines = price_cart(db, cart_lines, now)
    pay = get_payment_settings(db)

    card, balance = None, 0
    if gift_card_code:
        card, _ = giftcards.validate(db, gift_card_code, float("inf"), now)
        balance = card.current_balance
    quote = compute_quote(lines, shipping_address.get("country", ""), pay, balance)

    order = Order(
        order_number=unique_order_number(db, now),
        user_id=user_id,
        customer_name=customer["name"],
        customer_email=customer["email"],
        customer_phone=customer.get("phone"),
        shipping_address=shipping_address,
        billing_address=billing_address,
        subtotal=quote.subtotal,
        shipping_cost=quote.shipping_cost,
        tax=quote.tax,
        gift_card_discount=quote.gift_card_discount,
        total=quote.grand_total,
        status="pending",
        notes=notes,
    )
    for l in lines:
        p = l["product"]
        _take_stock(db, p, l["quantity"])
        order.items.append(OrderItem(
            product_id=p.id, product_name=p.name, product_image=p.cover_image,
            quantity=l["quantity"], unit_price=l["unit_price"],
            total_price=l["unit_price"] * l["quantity"],
        ))
    order.history.append(OrderStatusHistory(status="pending", notes="Order placed", created_at=now))
    db.add(order)
    db.flush()

    if card and quote.gift_card_discount > 0:
        giftcards.redeem(db, card, quote.gift_card_discount, order_id=order.id, now=now)

    logger.info("Order %s created: total %s, %d items", order.order_number, order.total, len(order.items))
    return order


def _release_order(db: Session, order: Order):
    """Put cancelled stock back on the shelf and credit any gift-card redemption."""
    for item in order.items:
        if item.product_id is None:
            continue
        (db.query(Product)
           .filter(Product.id == item.product_id, Product.is_made_to_order == False)  # noqa: E712
           .update({Product.stock_quantity: Product.stock_quantity + item.quantity},
                   synchronize_session=False))
    credited = giftcards.refund_order(db, order.id)
    logger.info("Order %s released: %d lines restocked, %s back to gift card",
                order.order_number, len(order.items), credited)


def change_status(db: Session, order: Order, status: str, changed_by: str = None, notes: str = None,
                  tracking_number: str = None, carrier_name: str = None, est_delivery_date=None,
                  cancellation_reason: str = None, refund_amount: float = None, refund_method: str = None,
                  force: bool = False) -> Order:
    """
    Move an order to a new status and append a history row.

    shipped always needs a tracking number and carrier; a non-forced
    cancellation needs a reason. The caller commits and dispatches the
    notification.
    """
    if status not in ORDER_STATUSES:
        raise InvalidTransition(f"Unknown status '{status}'")
    if not force and status not in TRANSITIONS.get(order.status, ()):
        raise InvalidTransition(f"Cannot move order from {order.status} to {status}")

    if status == "shipped":
        tracking_number = (tracking_number or order.tracking_number or "").strip()
        carrier_name = (carrier_name or order.carrier_name or "").strip()
        if not tracking_number or not carrier_name:
            raise MissingTrackingInfo("Tracking number and carrier are required to mark an order shipped")
        order.tracking_number = tracking_number
        order.carrier_name = carrier_name
        order.est_delivery_date = est_delivery_date or delivery.estimate_for_order(order, carrier_name)

    if status == "cancelled":
        reason = (cancellation_reason or "").strip()
        if not reason and not force:
            raise MissingCancellationReason("A cancellation reason is required")
        order.cancellation_reason = reason or order.cancellation_reason
        # the gift-card portion goes back to the card, the rest is refunded as money
        order.refund_amount = order.total if refund_amount is None else refund_amount
        order.refund_method = refund_method or "Original Payment Method"
        notes = notes or reason
        if not any(h.status == "cancelled" for h in order.history):
            _release_order(db, order)

    previous = order.status
    order.status = status
    order.history.append(OrderStatusHistory(status=status, changed_by=changed_by, notes=notes))
    db.flush()
    logger.info("Order %s: %s -> %s by %s%s", order.order_number, previous, status, changed_by,
                " (forced)" if force else "")
    return order


def update_shipping_cost(order: Order, shipping_cost: float) -> Order:
    order.shipping_cost = shipping_cost
    order.total = order_total(order.subtotal, shipping_cost, order.tax, order.gift_card_discount)
    return order


def delete_order(db: Session, order: Order):
    logger.info("Deleting order %s", order.order_number)
    db.delete(order)
