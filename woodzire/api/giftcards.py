from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin, get_or_404
from woodzire.models.giftcards import GiftCard
from woodzire.schemas import GiftCardIn, GiftCardOut, GiftCardValidateRequest
from woodzire.services import giftcards

router = APIRouter(tags=["gift-cards"])


@router.post("/gift-cards/validate")
def validate_gift_card(payload: GiftCardValidateRequest, db: Session = Depends(get_db)):
    try:
        card, discount = giftcards.validate(db, payload.code, payload.amount)
    except giftcards.GiftCardError as e:
        return {"valid": False, "kind": e.kind, "message": e.message, "discount": 0}
    message = None
    if card.current_balance < payload.amount:
        message = "Remaining amount will be charged separately"
    return {"valid": True, "code": card.code, "balance": card.current_balance,
            "discount": discount, "message": message}


@router.get("/gift-cards/public")
def public_gift_cards(db: Session = Depends(get_db)):
    cards = db.query(GiftCard).filter(GiftCard.is_public == True, GiftCard.is_active == True).all()  # noqa: E712
    return [{"code": c.code, "current_balance": c.current_balance, "expires_at": c.expires_at,
             "usage_limit": c.usage_limit, "usage_count": c.usage_count} for c in cards]


@router.get("/admin/gift-cards")
def list_gift_cards(db: Session = Depends(get_db), user=Depends(require_admin)):
    cards = db.query(GiftCard).order_by(GiftCard.created_at.desc(), GiftCard.id.desc()).all()
    return [GiftCardOut.model_validate(c) for c in cards]


@router.post("/admin/gift-cards", status_code=201)
def create_gift_card(payload: GiftCardIn,
                     db: Session = Depends(get_db), user=Depends(require_admin)):
    card = giftcards.create_gift_card(db, created_by=user.email, **payload.model_dump())
    db.commit(); db.refresh(card)
    return GiftCardOut.model_validate(card)


@router.post("/admin/gift-cards/{card_id}/toggle-active")
def toggle_active(card_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    card = get_or_404(db, GiftCard, card_id, "Gift card")
    if not card.is_active and card.current_balance <= 0:
        raise HTTPException(status_code=400, detail="Cannot reactivate a gift card with no balance")
    card.is_active = not card.is_active
    db.commit(); db.refresh(card)
    return GiftCardOut.model_validate(card)


@router.post("/admin/gift-cards/{card_id}/toggle-public")
def toggle_public(card_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    card = get_or_404(db, GiftCard, card_id, "Gift card")
    card.is_public = not card.is_public
    db.commit(); db.refresh(card)
    return GiftCardOut.model_validate(card)
