from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services import favorites as favorite_service
from app.utils.auth_helper import Principal, get_current_user_required


router = APIRouter()


@router.get("/user/favorites")
def get_my_favorites(
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    return favorite_service.list_favorites(session, current_user.user_id)


@router.post("/user/favorites/{ad_id}")
def add_favorite(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    favorite_service.add_favorite(session, current_user.user_id, ad_id)
    return {"ok": True}


@router.delete("/user/favorites/{ad_id}")
def remove_favorite(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    favorite_service.remove_favorite(session, current_user.user_id, ad_id)
    return {"ok": True}
