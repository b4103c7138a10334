from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services import promotions as promotion_service
from app.services.ads import serialize_ad
from app.utils.auth_helper import Principal, get_current_user_required
from app.utils.form_validator import PromotionRequest


router = APIRouter()


@router.post("/ads/{ad_id}/promotion")
def start_promotion(
    ad_id: str,
    payload: PromotionRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ad = promotion_service.activate(
        session,
        ad_id,
        current_user,
        label=payload.label,
        expires_at=payload.expires_at,
    )
    return serialize_ad(ad)


@router.delete("/ads/{ad_id}/promotion")
def stop_promotion(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ad = promotion_service.deactivate(session, ad_id, current_user)
    return serialize_ad(ad)
