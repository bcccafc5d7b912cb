import logging
import requests
from woodzire.core.config import settings

logger = logging.getLogger(__name__)


def send_order_notification(payload: dict) -> bool:
    """
    Post one event to the order-notification function.

    Fire-and-forget: any failure is logged and reported as False, never raised.
    """
    if not settings.NOTIFY_FUNCTION_URL:
        logger.debug("Notification endpoint not configured, skipping %s", payload.get("type"))
        return False
    headers = {"Authorization": f"Bearer {settings.NOTIFY_API_KEY}"} if settings.NOTIFY_API_KEY else {}
    try:
        resp = requests.post(settings.NOTIFY_FUNCTION_URL, json=payload, headers=headers,
                             timeout=settings.NOTIFY_TIMEOUT)
        resp.raise_for_status()
        return True
    except Exception:
        logger.warning("Failed to send %s notification", payload.get("type"), exc_info=True)
        return False


def _address(order):
    addr = order.shipping_address or {}
    return {k: addr.get(k, "") for k in ("street_address", "city", "state", "postal_code", "country")}


def _items(order):
    return [{"product_name": i.product_name, "quantity": i.quantity,
             "unit_price": i.unit_price, "total_price": i.total_price} for i in order.items]


def order_payload(order) -> dict:
    return {
        "order_number": order.order_number,
        "customer_name": order.customer_name,
        "customer_email": order.customer_email,
        "customer_phone": order.customer_phone,
        "items": _items(order),
        "subtotal": order.subtotal,
        "shipping_cost": order.shipping_cost,
        "tax": order.tax,
        "total": order.total,
        "shipping_address": _address(order),
        "status": order.status,
    }


def order_created_event(order) -> dict:
    # the function mails both the customer confirmation and the admin alert
    return {"type": "order_created", "order": order_payload(order)}


def status_event(order):
    """Event for an order's current status, or None when that status sends no mail."""
    body = order_payload(order)
    if order.status == "cancelled":
        body.update({
            "cancellation_reason": order.cancellation_reason,
            "refund_amount": order.refund_amount,
            "refund_method": order.refund_method,
        })
        return {"type": "order_cancelled", "order": body}
    if order.status in ("shipped", "delivered"):
        body.update({
            "tracking_number": order.tracking_number,
            "carrier_name": order.carrier_name,
            "est_delivery_date": order.est_delivery_date.isoformat() if order.est_delivery_date else None,
        })
        return {"type": "status_change", "order": body}
    return None


def _product(product):
    return {"id": product.id, "name": product.name, "stock_quantity": product.stock_quantity}


def back_in_stock_event(product, emails) -> dict:
    return {"type": "stock_update", "product": _product(product), "emails": list(emails)}


def low_stock_event(product) -> dict:
    return {"type": "admin_alert", "product": _product(product)}


def cart_reminder_event(cart) -> dict:
    return {"type": "cart_reminder", "email": cart.user_email, "cart_items": list(cart.cart_items or []),
            "total_amount": cart.total_amount}


def campaign_event(subject: str, template: str, content: dict, recipients) -> dict:
    return {"type": "campaign", "subject": subject, "template": template, "content": content,
            "recipients": list(recipients)}
