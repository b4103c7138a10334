from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from app.models.favorite import Favorite
from app.models.user import User
from app.services.ads import get_ad_or_404, parse_ad_id
from app.utils.errors import NotFoundError


def _ensure_user(session: Session, user_id: str):
    if not session.get(User, user_id):
        raise NotFoundError("User not found")


def add_favorite(session: Session, user_id: str, ad_id):
    _ensure_user(session, user_id)
    ad = get_ad_or_404(session, ad_id)

    if session.get_bind().dialect.name == "postgresql":
        stmt = pg_insert(Favorite.__table__)
    else:
        stmt = sqlite_insert(Favorite.__table__)

    # adding twice is a no-op
    session.exec(
        stmt.values(user_id=user_id, ad_id=ad.id)
        .on_conflict_do_nothing(index_elements=["user_id", "ad_id"])
    )
    session.commit()


def remove_favorite(session: Session, user_id: str, ad_id):
    _ensure_user(session, user_id)

    session.exec(
        delete(Favorite)
        .where(Favorite.user_id == user_id)
        .where(Favorite.ad_id == parse_ad_id(ad_id))
    )
    session.commit()


def list_favorites(session: Session, user_id: str) -> list[str]:
    _ensure_user(session, user_id)

    ad_ids = session.exec(
        select(Favorite.ad_id)
        .where(Favorite.user_id == user_id)
        .order_by(Favorite.created_at)
    ).all()

    return [str(ad_id) for ad_id in ad_ids]
