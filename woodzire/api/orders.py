import logging
from typing import Optional

from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session

from woodzire.api.checkout import http_error
from woodzire.api.deps import get_db, require_admin, get_or_404, require_confirmation
from woodzire.models.orders import Order, OrderStatusHistory
from woodzire.schemas import (OrderOut, StatusHistoryOut, ShipRequest, CancelRequest,
                              StatusUpdate, ShippingCostUpdate, ManualOrderRequest)
from woodzire.services import orders as order_service, notify, delivery
from woodzire.services.giftcards import GiftCardError

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/admin/orders", tags=["admin-orders"])


def _apply(db: Session, background: BackgroundTasks, order: Order, status: str, **kwargs):
    try:
        order_service.change_status(db, order, status, **kwargs)
        db.commit()
    except order_service.OrderError as e:
        db.rollback()
        raise http_error(e)
    db.refresh(order)
    event = notify.status_event(order)
    if event:
        background.add_task(notify.send_order_notification, event)
    return OrderOut.model_validate(order)


@router.get("")
def list_orders(status: Optional[str] = None, db: Session = Depends(get_db), user=Depends(require_admin)):
    q = db.query(Order)
    if status and status != "all":
        q = q.filter(Order.status == status.lower())
    return [OrderOut.model_validate(o) for o in q.order_by(Order.created_at.desc(), Order.id.desc()).all()]


@router.post("/manual", status_code=201)
def create_manual_order(payload: ManualOrderRequest, background: BackgroundTasks,
                        db: Session = Depends(get_db), user=Depends(require_admin)):
    """Order taken over the phone or in the showroom; priced and stocked like a checkout."""
    customer = {"name": payload.full_name, "email": payload.email, "phone": payload.phone}
    try:
        order = order_service.create_order(
            db, customer, payload.address(), [l.model_dump() for l in payload.items],
            gift_card_code=payload.gift_card_code, notes=payload.notes)
        order.history[0].changed_by = user.email
        order.history[0].notes = "Manual order"
        db.commit()
    except (order_service.OrderError, GiftCardError) as e:
        db.rollback()
        raise http_error(e)
    db.refresh(order)
    logger.info("Manual order %s entered by %s", order.order_number, user.email)
    if payload.notify_customer:
        background.add_task(notify.send_order_notification, notify.order_created_event(order))
    return OrderOut.model_validate(order)


@router.get("/{order_id}")
def get_order(order_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    return OrderOut.model_validate(get_or_404(db, Order, order_id))


@router.get("/{order_id}/history")
def order_history(order_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    get_or_404(db, Order, order_id)
    rows = (db.query(OrderStatusHistory).filter(OrderStatusHistory.order_id == order_id)
              .order_by(OrderStatusHistory.created_at, OrderStatusHistory.id).all())
    return [StatusHistoryOut.model_validate(r) for r in rows]


@router.get("/{order_id}/delivery-estimate")
def delivery_estimate(order_id: int, carrier: Optional[str] = None,
                      db: Session = Depends(get_db), user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    est = delivery.estimate_for_order(order, carrier)
    early, late = delivery.delivery_range(est)
    return {"carrier_name": carrier or order.carrier_name or delivery.DEFAULT_CARRIER,
            "est_delivery_date": est, "range": [early, late], "carriers": delivery.AVAILABLE_CARRIERS}


@router.post("/{order_id}/prepare")
def prepare_order(order_id: int, background: BackgroundTasks, db: Session = Depends(get_db),
                  user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    return _apply(db, background, order, "preparing", changed_by=user.email)


@router.post("/{order_id}/ship")
def ship_order(order_id: int, payload: ShipRequest, background: BackgroundTasks,
               db: Session = Depends(get_db), user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    return _apply(db, background, order, "shipped", changed_by=user.email, notes=payload.notes,
                  tracking_number=payload.tracking_number, carrier_name=payload.carrier_name,
                  est_delivery_date=payload.est_delivery_date)


@router.post("/{order_id}/deliver")
def deliver_order(order_id: int, background: BackgroundTasks, db: Session = Depends(get_db),
                  user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    return _apply(db, background, order, "delivered", changed_by=user.email)


@router.post("/{order_id}/cancel")
def cancel_order(order_id: int, payload: CancelRequest, background: BackgroundTasks,
                 db: Session = Depends(get_db), user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    return _apply(db, background, order, "cancelled", changed_by=user.email,
                  cancellation_reason=payload.reason, refund_amount=payload.refund_amount,
                  refund_method=payload.refund_method)


@router.put("/{order_id}/status")
def set_status(order_id: int, payload: StatusUpdate, background: BackgroundTasks,
               db: Session = Depends(get_db), user=Depends(require_admin)):
    """Status dropdown. With force=true any state may be set, as a manual correction."""
    order = get_or_404(db, Order, order_id)
    return _apply(db, background, order, payload.status, changed_by=user.email, notes=payload.notes,
                  tracking_number=payload.tracking_number, carrier_name=payload.carrier_name,
                  est_delivery_date=payload.est_delivery_date,
                  cancellation_reason=payload.cancellation_reason, force=payload.force)


@router.put("/{order_id}/shipping")
def edit_shipping_cost(order_id: int, payload: ShippingCostUpdate, db: Session = Depends(get_db),
                       user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    order_service.update_shipping_cost(order, payload.shipping_cost)
    db.commit(); db.refresh(order)
    logger.info("Order %s shipping set to %s by %s", order.order_number, payload.shipping_cost, user.email)
    return OrderOut.model_validate(order)


@router.delete("/{order_id}")
def delete_order(order_id: int, confirmed: bool = Depends(require_confirmation),
                 db: Session = Depends(get_db), user=Depends(require_admin)):
    order = get_or_404(db, Order, order_id)
    order_service.delete_order(db, order)
    db.commit()
    return {"id": order_id, "deleted": True}
