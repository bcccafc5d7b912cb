from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from woodzire.api.deps import get_db, require_admin
from woodzire.schemas import PaymentSettingsIn
from woodzire.services.site_settings import get_payment_settings, save_payment_settings

router = APIRouter(prefix="/admin/settings", tags=["settings"])


@router.get("/payment")
def read_payment_settings(db: Session = Depends(get_db), user=Depends(require_admin)):
    return get_payment_settings(db)


@router.put("/payment")
def write_payment_settings(payload: PaymentSettingsIn, db: Session = Depends(get_db), user=Depends(require_admin)):
    return save_payment_settings(db, payload.model_dump(exclude_none=True))
