import uuid
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import delete, func, or_
from sqlmodel import Session, select

from app.models.ad import Ad
from app.models.rating import Rating
from app.models.user import User
from app.utils.auth_helper import Principal, ensure_can_mutate_ad
from app.utils.errors import NotFoundError, ValidationError
from app.utils.form_validator import AdCreateRequest, AdUpdateRequest, as_utc, parse_timestamp
from app.utils.logger import logger


def parse_ad_id(ad_id) -> uuid.UUID:
    if isinstance(ad_id, uuid.UUID):
        return ad_id
    try:
        return uuid.UUID(str(ad_id))
    except ValueError:
        raise ValidationError("Invalid ad ID")


def get_ad_or_404(session: Session, ad_id, for_update: bool = False) -> Ad:
    query = select(Ad).where(Ad.id == parse_ad_id(ad_id))

    if for_update:
        query = query.with_for_update()

    ad = session.exec(query).first()
    if not ad:
        raise NotFoundError("Ad not found")

    return ad


def serialize_ad(ad: Ad, now: Optional[datetime] = None) -> dict:
    """Ad payload with the read-time expiry flags filled in."""
    now = now or datetime.now(timezone.utc)

    data = ad.model_dump()
    data["id"] = str(ad.id)
    data["available_until"] = as_utc(ad.available_until).isoformat()
    data["created_at"] = as_utc(ad.created_at).isoformat()

    expires_at = as_utc(ad.promotion_expires_at)
    data["promotion_expires_at"] = expires_at.isoformat() if expires_at else None

    # nothing flips these in the store; readers compare against the clock
    data["is_expired"] = ad.status == "expired" or as_utc(ad.available_until) < now
    data["promotion_expired"] = bool(ad.promotion_active and expires_at and expires_at < now)

    return data


AUTHOR_FIELDS = ("id", "name", "course", "period", "contact", "room")


def get_ad_detail(session: Session, ad_id) -> dict:
    """Single ad with the public side of its author's profile."""
    ad = get_ad_or_404(session, ad_id)
    author = session.get(User, ad.author_id)

    data = serialize_ad(ad)
    data["author"] = {field: getattr(author, field) for field in AUTHOR_FIELDS} if author else None
    return data


def create_ad(session: Session, author_id: str, payload: AdCreateRequest) -> Ad:
    if not session.get(User, author_id):
        raise NotFoundError("User not found")

    ad = Ad(
        author_id=author_id,
        title=payload.title.strip(),
        category=payload.category.strip(),
        description=payload.description.strip(),
        price=payload.price.strip(),
        location=payload.location.strip(),
        available_until=parse_timestamp(payload.available_until, "available_until"),
    )

    session.add(ad)
    session.commit()
    session.refresh(ad)

    logger.info("Ad %s created by %s", ad.id, author_id)
    return ad


def list_ads(session: Session, search: Optional[str] = None) -> list[dict]:
    query = (
        select(Ad, User)
        .join(User, User.id == Ad.author_id)
        .order_by(Ad.created_at.desc())
    )

    if search and search.strip():
        pattern = f"%{search.strip().lower()}%"
        query = query.where(
            or_(
                func.lower(Ad.title).like(pattern),
                func.lower(Ad.description).like(pattern),
            )
        )

    results = session.exec(query).all()

    ads = []
    for ad, author in results:
        data = serialize_ad(ad)
        data["author_name"] = author.name
        ads.append(data)

    return ads


def list_user_ads(session: Session, user_id: str) -> list[Ad]:
    return session.exec(
        select(Ad)
        .where(Ad.author_id == user_id)
        .order_by(Ad.created_at.desc())
    ).all()


def update_ad(session: Session, ad_id, principal: Principal, payload: AdUpdateRequest) -> Ad:
    ad = get_ad_or_404(session, ad_id)
    ensure_can_mutate_ad(principal, ad, "edit")

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("No fields provided for update")

    for field, value in changes.items():
        if field == "available_until":
            value = parse_timestamp(value, "available_until")
        elif isinstance(value, str):
            value = value.strip()

        setattr(ad, field, value)

    session.add(ad)
    session.commit()
    session.refresh(ad)

    return ad


def delete_ad(session: Session, ad_id, principal: Principal):
    ad = get_ad_or_404(session, ad_id)
    ensure_can_mutate_ad(principal, ad, "delete")

    deleted_id = ad.id

    # Ratings belong to the ad; reports and favorites are left alone
    session.exec(delete(Rating).where(Rating.ad_id == deleted_id))
    session.delete(ad)
    session.commit()

    logger.info("Ad %s deleted by %s", deleted_id, principal.user_id)
