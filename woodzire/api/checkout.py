import logging

from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, current_user, require_login
from woodzire.models.orders import Order
from woodzire.schemas import QuoteRequest, CheckoutRequest, OrderOut, TrackedOrderOut
from woodzire.services import orders as order_service, customer as customer_service, notify
from woodzire.services.giftcards import GiftCardError
from woodzire.services.site_settings import get_payment_settings, public_payment_settings

logger = logging.getLogger(__name__)
router = APIRouter(tags=["checkout"])


def http_error(e: Exception) -> HTTPException:
    if isinstance(e, GiftCardError):
        code = 409 if e.kind == "insufficient_balance" else 400
        return HTTPException(status_code=code, detail={"gift_card": e.message, "kind": e.kind})
    return HTTPException(status_code=getattr(e, "status_code", 400), detail=str(e))


@router.get("/settings/payment")
def payment_settings(db: Session = Depends(get_db)):
    return public_payment_settings(get_payment_settings(db))


@router.post("/checkout/quote")
def quote(payload: QuoteRequest, db: Session = Depends(get_db)):
    lines = [l.model_dump() for l in payload.items]
    try:
        q, gift_card_message = order_service.quote_cart(db, lines, payload.country, payload.gift_card_code)
    except order_service.OrderError as e:
        raise http_error(e)
    return {**q.to_dict(), "gift_card_message": gift_card_message}


@router.post("/checkout", status_code=201)
def checkout(payload: CheckoutRequest, background: BackgroundTasks,
             db: Session = Depends(get_db), user=Depends(current_user)):
    customer = {"name": payload.full_name, "email": payload.email, "phone": payload.phone}
    try:
        order = order_service.create_order(
            db, customer, payload.address(), [l.model_dump() for l in payload.items],
            gift_card_code=payload.gift_card_code, notes=payload.notes,
            user_id=user.id if user else None)
        customer_service.mark_cart_recovered(db, payload.email)
        db.commit()
    except (order_service.OrderError, GiftCardError) as e:
        db.rollback()
        logger.info("Checkout rejected: %s", e)
        raise http_error(e)
    db.refresh(order)
    background.add_task(notify.send_order_notification, notify.order_created_event(order))
    return OrderOut.model_validate(order)


@router.get("/orders/track/{order_number}")
def track_order(order_number: str, db: Session = Depends(get_db)):
    order = db.query(Order).filter(Order.order_number == order_number.strip().upper()).first()
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return TrackedOrderOut.model_validate(order)


@router.get("/orders/mine")
def my_orders(db: Session = Depends(get_db), user=Depends(require_login)):
    orders = (db.query(Order).filter(Order.user_id == user.id)
                .order_by(Order.created_at.desc()).all())
    return [OrderOut.model_validate(o) for o in orders]
