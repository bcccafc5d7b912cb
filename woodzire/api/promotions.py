from datetime import datetime

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin, get_or_404, require_confirmation
from woodzire.models.promotions import ScheduledSale, PromotionalBanner
from woodzire.schemas import (ScheduledSaleIn, ScheduledSaleOut, SaleApplyRequest, SaleRemoveRequest,
                              BannerIn, BannerOut)
from woodzire.services import promotions

router = APIRouter(tags=["promotions"])


def sale_out(sale: ScheduledSale, now: datetime) -> ScheduledSaleOut:
    out = ScheduledSaleOut.model_validate(sale)
    out.status = promotions.sale_status(sale, now)
    return out


# Banners

@router.get("/banners/active")
def active_banner(db: Session = Depends(get_db)):
    banner = promotions.active_banner(db)
    return BannerOut.model_validate(banner) if banner else None


@router.get("/admin/banners")
def list_banners(db: Session = Depends(get_db), user=Depends(require_admin)):
    rows = db.query(PromotionalBanner).order_by(PromotionalBanner.created_at.desc()).all()
    return [BannerOut.model_validate(b) for b in rows]


@router.post("/admin/banners", status_code=201)
def create_banner(payload: BannerIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    b = PromotionalBanner(**payload.model_dump())
    db.add(b); db.commit(); db.refresh(b)
    return BannerOut.model_validate(b)


@router.put("/admin/banners/{banner_id}")
def update_banner(banner_id: int, payload: BannerIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    b = get_or_404(db, PromotionalBanner, banner_id, "Banner")
    for k, v in payload.model_dump().items():
        setattr(b, k, v)
    db.commit(); db.refresh(b)
    return BannerOut.model_validate(b)


@router.delete("/admin/banners/{banner_id}")
def delete_banner(banner_id: int, confirmed: bool = Depends(require_confirmation),
                  db: Session = Depends(get_db), user=Depends(require_admin)):
    b = get_or_404(db, PromotionalBanner, banner_id, "Banner")
    db.delete(b); db.commit()
    return {"id": banner_id, "deleted": True}


# Instant sale on products

@router.post("/admin/sales/apply")
def apply_sale(payload: SaleApplyRequest, db: Session = Depends(get_db), user=Depends(require_admin)):
    n = promotions.apply_sale(db, payload.product_ids, payload.discount_percentage)
    db.commit()
    return {"updated": n}


@router.post("/admin/sales/remove")
def remove_sale(payload: SaleRemoveRequest, db: Session = Depends(get_db), user=Depends(require_admin)):
    n = promotions.remove_sale(db, payload.product_ids)
    db.commit()
    return {"updated": n}


# Scheduled sales

@router.get("/admin/scheduled-sales")
def list_scheduled_sales(db: Session = Depends(get_db), user=Depends(require_admin)):
    now = datetime.utcnow()
    sales = db.query(ScheduledSale).order_by(ScheduledSale.start_date.desc()).all()
    buckets = promotions.classify_sales(sales, now)
    return {
        "sales": [sale_out(s, now) for s in sales],
        **{name: [s.id for s in rows] for name, rows in buckets.items()},
    }


@router.post("/admin/scheduled-sales", status_code=201)
def create_scheduled_sale(payload: ScheduledSaleIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    s = ScheduledSale(**payload.model_dump())
    db.add(s); db.commit(); db.refresh(s)
    return sale_out(s, datetime.utcnow())


@router.put("/admin/scheduled-sales/{sale_id}")
def update_scheduled_sale(sale_id: int, payload: ScheduledSaleIn, db: Session = Depends(get_db),
                          user=Depends(require_admin)):
    s = get_or_404(db, ScheduledSale, sale_id, "Scheduled sale")
    for k, v in payload.model_dump().items():
        setattr(s, k, v)
    db.commit(); db.refresh(s)
    return sale_out(s, datetime.utcnow())


@router.post("/admin/scheduled-sales/{sale_id}/toggle-pause")
def toggle_pause(sale_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    s = get_or_404(db, ScheduledSale, sale_id, "Scheduled sale")
    s.is_paused = not s.is_paused
    db.commit(); db.refresh(s)
    return sale_out(s, datetime.utcnow())


@router.post("/admin/scheduled-sales/{sale_id}/apply")
def apply_scheduled_sale(sale_id: int, db: Session = Depends(get_db), user=Depends(require_admin)):
    s = get_or_404(db, ScheduledSale, sale_id, "Scheduled sale")
    n = promotions.apply_scheduled_sale(db, s)
    db.commit()
    return {"updated": n}


@router.delete("/admin/scheduled-sales/{sale_id}")
def delete_scheduled_sale(sale_id: int, confirmed: bool = Depends(require_confirmation),
                          db: Session = Depends(get_db), user=Depends(require_admin)):
    s = get_or_404(db, ScheduledSale, sale_id, "Scheduled sale")
    db.delete(s); db.commit()
    return {"id": sale_id, "deleted": True}
