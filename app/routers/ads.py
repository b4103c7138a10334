from typing import Optional
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services import ads as ad_service
from app.utils.auth_helper import Principal, get_current_user_required
from app.utils.form_validator import AdCreateRequest, AdUpdateRequest


router = APIRouter()


@router.post("/ads", status_code=201)
def create_ad(
    payload: AdCreateRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ad = ad_service.create_ad(session, current_user.user_id, payload)
    return {"ad": ad_service.serialize_ad(ad)}


@router.get("/ads")
def get_all_ads(
    search: Optional[str] = None,
    session: Session = Depends(get_session),
):
    return ad_service.list_ads(session, search)


@router.get("/ads/{ad_id}")
def get_ad(
    ad_id: str,
    session: Session = Depends(get_session),
):
    return ad_service.get_ad_detail(session, ad_id)


@router.get("/my-ads")
def get_my_ads(
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ads = ad_service.list_user_ads(session, current_user.user_id)
    return [ad_service.serialize_ad(ad) for ad in ads]


@router.patch("/ads/{ad_id}")
def update_ad(
    ad_id: str,
    payload: AdUpdateRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ad = ad_service.update_ad(session, ad_id, current_user, payload)
    return ad_service.serialize_ad(ad)


@router.delete("/ads/{ad_id}")
def delete_ad(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    ad_service.delete_ad(session, ad_id, current_user)
    return {"ok": True}
