from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services import ratings as rating_service
from app.utils.auth_helper import Principal, get_current_user_required
from app.utils.form_validator import RatingRequest


router = APIRouter()


@router.post("/ads/{ad_id}/ratings")
def rate_ad(
    ad_id: str,
    payload: RatingRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    rating_service.submit_rating(
        session,
        ad_id,
        current_user.user_id,
        payload.rating,
        payload.comment,
    )
    return {"ok": True}


@router.get("/ads/{ad_id}/ratings")
def get_ad_ratings(
    ad_id: str,
    session: Session = Depends(get_session),
):
    return rating_service.list_ratings(session, ad_id)


@router.delete("/ads/{ad_id}/ratings")
def delete_my_rating(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    rating_service.remove_rating(session, ad_id, current_user.user_id)
    return {"ok": True}


@router.get("/user/ratings")
def get_my_ratings(
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    return rating_service.list_user_ratings(session, current_user.user_id)
