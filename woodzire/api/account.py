import logging

from fastapi import APIRouter, Depends, HTTPException, BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from woodzire.api.checkout import http_error
from woodzire.api.catalog import product_out
from woodzire.api.deps import get_db, current_user, require_login, require_admin, get_or_404
from woodzire.models.catalog import Product
from woodzire.models.customer import WishlistItem, Address, AbandonedCart
from woodzire import schemas
from woodzire.services import customer, notify, orders as order_service
from woodzire.services.promotions import live_sales

logger = logging.getLogger(__name__)
router = APIRouter(tags=["account"])


def _own(row, user):
    if row is None or row.user_id != user.id:
        raise HTTPException(status_code=404, detail="Not found")
    return row


# Wishlist

@router.get("/wishlist")
def list_wishlist(db: Session = Depends(get_db), user=Depends(require_login)):
    rows = (db.query(WishlistItem).filter(WishlistItem.user_id == user.id)
              .order_by(WishlistItem.created_at.desc(), WishlistItem.id.desc()).all())
    sales = live_sales(db)
    return [{"id": w.id, "product_id": w.product_id, "created_at": w.created_at,
             "product": product_out(w.product, sales) if w.product else None} for w in rows]


@router.post("/wishlist", status_code=201)
def add_to_wishlist(payload: schemas.WishlistIn, db: Session = Depends(get_db), user=Depends(require_login)):
    get_or_404(db, Product, payload.product_id, "Product")
    w = WishlistItem(user_id=user.id, product_id=payload.product_id)
    db.add(w)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Already in your wishlist")
    return {"id": w.id, "product_id": w.product_id}


@router.delete("/wishlist/{item_id}")
def remove_from_wishlist(item_id: int, db: Session = Depends(get_db), user=Depends(require_login)):
    w = _own(db.get(WishlistItem, item_id), user)
    db.delete(w); db.commit()
    return {"id": item_id, "deleted": True}


# Saved addresses

@router.get("/addresses")
def list_addresses(db: Session = Depends(get_db), user=Depends(require_login)):
    rows = (db.query(Address).filter(Address.user_id == user.id)
              .order_by(Address.is_default.desc(), Address.created_at.desc()).all())
    return [schemas.AddressOut.model_validate(a) for a in rows]


@router.post("/addresses", status_code=201)
def create_address(payload: schemas.AddressIn, db: Session = Depends(get_db), user=Depends(require_login)):
    a = customer.save_address(db, user.id, payload.model_dump())
    db.commit(); db.refresh(a)
    return schemas.AddressOut.model_validate(a)


@router.put("/addresses/{address_id}")
def update_address(address_id: int, payload: schemas.AddressIn, db: Session = Depends(get_db),
                   user=Depends(require_login)):
    a = _own(db.get(Address, address_id), user)
    customer.save_address(db, user.id, payload.model_dump(), a)
    db.commit(); db.refresh(a)
    return schemas.AddressOut.model_validate(a)


@router.delete("/addresses/{address_id}")
def delete_address(address_id: int, db: Session = Depends(get_db), user=Depends(require_login)):
    a = _own(db.get(Address, address_id), user)
    db.delete(a); db.commit()
    return {"id": address_id, "deleted": True}


# Email preferences

@router.get("/me/email-preferences")
def email_preferences(db: Session = Depends(get_db), user=Depends(require_login)):
    prefs = customer.get_email_preferences(db, user)
    db.commit(); db.refresh(prefs)
    return schemas.EmailPreferencesOut.model_validate(prefs)


@router.put("/me/email-preferences")
def update_email_preferences(payload: schemas.EmailPreferencesIn, db: Session = Depends(get_db),
                             user=Depends(require_login)):
    prefs = customer.get_email_preferences(db, user)
    for k, v in payload.model_dump(exclude_none=True).items():
        setattr(prefs, k, v)
    db.commit(); db.refresh(prefs)
    return schemas.EmailPreferencesOut.model_validate(prefs)


# Abandoned carts

@router.post("/carts/abandoned", status_code=201)
def save_abandoned_cart(payload: schemas.AbandonedCartIn, db: Session = Depends(get_db), user=Depends(current_user)):
    try:
        cart = customer.save_abandoned_cart(db, payload.email, [l.model_dump() for l in payload.items],
                                            user_id=user.id if user else None)
        db.commit()
    except order_service.OrderError as e:
        db.rollback()
        raise http_error(e)
    db.refresh(cart)
    return schemas.AbandonedCartOut.model_validate(cart)


@router.get("/admin/abandoned-carts")
def list_abandoned_carts(include_recovered: bool = False, db: Session = Depends(get_db),
                         user=Depends(require_admin)):
    q = db.query(AbandonedCart)
    if not include_recovered:
        q = q.filter(AbandonedCart.recovered == False)  # noqa: E712
    rows = q.order_by(AbandonedCart.created_at.desc(), AbandonedCart.id.desc()).all()
    return [schemas.AbandonedCartOut.model_validate(c) for c in rows]


@router.post("/admin/abandoned-carts/{cart_id}/remind")
def send_cart_reminder(cart_id: int, background: BackgroundTasks, db: Session = Depends(get_db),
                       user=Depends(require_admin)):
    cart = get_or_404(db, AbandonedCart, cart_id, "Cart")
    if cart.recovered:
        raise HTTPException(status_code=400, detail="Cart has already been recovered")
    customer.record_reminder(cart)
    db.commit(); db.refresh(cart)
    background.add_task(notify.send_order_notification, notify.cart_reminder_event(cart))
    logger.info("Cart reminder %d sent to %s by %s", cart.reminder_sent_count, cart.user_email, user.email)
    return schemas.AbandonedCartOut.model_validate(cart)


@router.post("/admin/abandoned-carts/{cart_id}/recovered")
def mark_cart_recovered(cart_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    cart = get_or_404(db, AbandonedCart, cart_id, "Cart")
    cart.recovered = True
    db.commit(); db.refresh(cart)
    return schemas.AbandonedCartOut.model_validate(cart)


# Email campaigns

@router.post("/admin/campaigns/send")
def send_campaign(payload: schemas.CampaignRequest, background: BackgroundTasks, db: Session = Depends(get_db),
                  user=Depends(require_admin)):
    """Queue a campaign; a test_email sends to that single address instead of the audience."""
    recipients = [payload.test_email] if payload.test_email else customer.campaign_recipients(db, payload.template)
    if not recipients:
        return {"sent": False, "total_recipients": 0, "message": "No subscribers found for this campaign type"}
    content = payload.content.model_dump(exclude_none=True)
    batches = customer.batched(recipients)
    for batch in batches:
        background.add_task(notify.send_order_notification,
                            notify.campaign_event(payload.subject, payload.template, content, batch))
    logger.info("Campaign '%s' (%s) queued for %d recipients by %s", payload.subject, payload.template,
                len(recipients), user.email)
    return {"sent": True, "total_recipients": len(recipients), "batches": len(batches)}
