from fastapi import APIRouter
from fastapi.params import Depends
from sqlmodel import Session, select, func

from app.db.db import get_session
from app.models.ad import Ad
from app.utils.auth_helper import Principal, get_current_user_required, get_db_user
from app.utils.errors import ValidationError
from app.utils.form_validator import ProfileUpdateRequest


router = APIRouter()


@router.get("/me")
async def get_my_profile(
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    user = get_db_user(session, current_user)

    ads_count = session.exec(
        select(func.count(Ad.id)).where(Ad.author_id == user.id)
    ).one()

    return {
        "user": user,
        "ads_posted": ads_count,
    }


@router.patch("/me")
async def update_my_profile(
    payload: ProfileUpdateRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    user = get_db_user(session, current_user)

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("No fields provided for update")

    for field, value in changes.items():
        setattr(user, field, value)

    session.add(user)
    session.commit()
    session.refresh(user)

    return user
