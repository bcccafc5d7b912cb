import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, current_user, require_moderator, get_or_404, require_confirmation
from woodzire.models.catalog import Product
from woodzire.models.engagement import Testimonial, Review, Inquiry, StockAlert
from woodzire import schemas

logger = logging.getLogger(__name__)
router = APIRouter(tags=["engagement"])


# Testimonials

@router.get("/testimonials")
def active_testimonials(db: Session = Depends(get_db)):
    rows = (db.query(Testimonial).filter(Testimonial.is_active == True)  # noqa: E712
              .order_by(Testimonial.is_featured.desc(), Testimonial.created_at.desc()).all())
    return [schemas.TestimonialOut.model_validate(t) for t in rows]


@router.get("/admin/testimonials")
def list_testimonials(db: Session = Depends(get_db), user=Depends(require_moderator)):
    rows = db.query(Testimonial).order_by(Testimonial.created_at.desc()).all()
    return [schemas.TestimonialOut.model_validate(t) for t in rows]


@router.post("/admin/testimonials", status_code=201)
def create_testimonial(payload: schemas.TestimonialIn, db: Session = Depends(get_db), user=Depends(require_moderator)):
    t = Testimonial(**payload.model_dump())
    db.add(t); db.commit(); db.refresh(t)
    return schemas.TestimonialOut.model_validate(t)


@router.put("/admin/testimonials/{testimonial_id}")
def update_testimonial(testimonial_id: int, payload: schemas.TestimonialIn,
                       db: Session = Depends(get_db), user=Depends(require_moderator)):
    t = get_or_404(db, Testimonial, testimonial_id, "Testimonial")
    for k, v in payload.model_dump().items():
        setattr(t, k, v)
    db.commit(); db.refresh(t)
    return schemas.TestimonialOut.model_validate(t)


@router.post("/admin/testimonials/{testimonial_id}/toggle-active")
def toggle_testimonial(testimonial_id: int, db: Session = Depends(get_db), user=Depends(require_moderator)):
    t = get_or_404(db, Testimonial, testimonial_id, "Testimonial")
    t.is_active = not t.is_active
    db.commit(); db.refresh(t)
    return schemas.TestimonialOut.model_validate(t)


@router.delete("/admin/testimonials/{testimonial_id}")
def delete_testimonial(testimonial_id: int, confirmed: bool = Depends(require_confirmation),
                       db: Session = Depends(get_db), user=Depends(require_moderator)):
    t = get_or_404(db, Testimonial, testimonial_id, "Testimonial")
    db.delete(t); db.commit()
    return {"id": testimonial_id, "deleted": True}


# Reviews

@router.post("/reviews", status_code=201)
def submit_review(payload: schemas.ReviewIn, db: Session = Depends(get_db), user=Depends(current_user)):
    get_or_404(db, Product, payload.product_id, "Product")
    r = Review(**payload.model_dump(), user_id=user.id if user else None)
    db.add(r); db.commit(); db.refresh(r)
    return schemas.ReviewOut.model_validate(r)


@router.get("/products/{product_id}/reviews")
def approved_reviews(product_id: int, db: Session = Depends(get_db)):
    rows = (db.query(Review).filter(Review.product_id == product_id, Review.is_approved == True)  # noqa: E712
              .order_by(Review.is_featured.desc(), Review.created_at.desc()).all())
    return [schemas.ReviewOut.model_validate(r) for r in rows]


@router.get("/admin/reviews")
def list_reviews(pending: bool = False, db: Session = Depends(get_db), user=Depends(require_moderator)):
    q = db.query(Review)
    if pending:
        q = q.filter(Review.is_approved == False)  # noqa: E712
    return [schemas.ReviewOut.model_validate(r) for r in q.order_by(Review.created_at.desc()).all()]


@router.put("/admin/reviews/{review_id}")
def moderate_review(review_id: int, payload: schemas.ReviewModeration,
                    db: Session = Depends(get_db), user=Depends(require_moderator)):
    r = get_or_404(db, Review, review_id, "Review")
    for k, v in payload.model_dump(exclude_none=True).items():
        setattr(r, k, v)
    db.commit(); db.refresh(r)
    logger.info("Review %s moderated by %s: approved=%s featured=%s", r.id, user.email, r.is_approved, r.is_featured)
    return schemas.ReviewOut.model_validate(r)


@router.delete("/admin/reviews/{review_id}")
def delete_review(review_id: int, confirmed: bool = Depends(require_confirmation),
                  db: Session = Depends(get_db), user=Depends(require_moderator)):
    r = get_or_404(db, Review, review_id, "Review")
    db.delete(r); db.commit()
    return {"id": review_id, "deleted": True}


# Inquiries

@router.post("/inquiries", status_code=201)
def submit_inquiry(payload: schemas.InquiryIn, db: Session = Depends(get_db)):
    i = Inquiry(**payload.model_dump())
    db.add(i); db.commit(); db.refresh(i)
    return schemas.InquiryOut.model_validate(i)


@router.get("/admin/inquiries")
def list_inquiries(unread: bool = False, db: Session = Depends(get_db), user=Depends(require_moderator)):
    q = db.query(Inquiry)
    if unread:
        q = q.filter(Inquiry.is_read == False)  # noqa: E712
    return [schemas.InquiryOut.model_validate(i) for i in q.order_by(Inquiry.created_at.desc()).all()]


@router.post("/admin/inquiries/{inquiry_id}/read")
def mark_inquiry_read(inquiry_id: int, db: Session = Depends(get_db), user=Depends(require_moderator)):
    i = get_or_404(db, Inquiry, inquiry_id, "Inquiry")
    i.is_read = True
    db.commit(); db.refresh(i)
    return schemas.InquiryOut.model_validate(i)


# Back-in-stock alerts

@router.post("/stock-alerts", status_code=201)
def subscribe_stock_alert(payload: schemas.StockAlertIn, db: Session = Depends(get_db), user=Depends(current_user)):
    get_or_404(db, Product, payload.product_id, "Product")
    alert = StockAlert(product_id=payload.product_id, user_email=payload.email.lower(),
                       user_id=user.id if user else None)
    db.add(alert)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="You are already subscribed to alerts for this product")
    return {"product_id": payload.product_id, "email": alert.user_email, "subscribed": True}
