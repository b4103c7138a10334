from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from sqlalchemy import delete, func, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlmodel import Session, select

from app.models.ad import Ad
from app.models.rating import Rating
from app.services.ads import get_ad_or_404
from app.utils.errors import ValidationError
from app.utils.logger import logger

MIN_RATING = 1
MAX_RATING = 5
MAX_COMMENT_LENGTH = 200


def round_average(total: int, count: int) -> float:
    """Mean rounded half-up to one decimal; 0 when there is nothing to average."""
    if not count:
        return 0.0

    mean = Decimal(total) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def _upsert_statement(session: Session, values: dict):
    dialect = session.get_bind().dialect.name

    if dialect == "postgresql":
        stmt = pg_insert(Rating.__table__).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite_insert(Rating.__table__).values(**values)
    else:
        raise NotImplementedError(f"Rating upsert not supported on {dialect}")

    return stmt.on_conflict_do_update(
        index_elements=["ad_id", "user_id"],
        set_={
            "rating": stmt.excluded.rating,
            "comment": stmt.excluded.comment,
            "created_at": stmt.excluded.created_at,
        },
    )


def _recompute(session: Session, ad: Ad):
    total, count = session.exec(
        select(func.coalesce(func.sum(Rating.rating), 0), func.count(Rating.id))
        .where(Rating.ad_id == ad.id)
    ).one()

    # written unconditionally; the in-memory ad may predate a concurrent commit
    session.exec(
        update(Ad)
        .where(Ad.id == ad.id)
        .values(rating_count=count, average_rating=round_average(total, count))
    )


def submit_rating(
    session: Session,
    ad_id,
    rater_id: str,
    value: int,
    comment: Optional[str] = None,
):
    if isinstance(value, bool) or not isinstance(value, int) or not MIN_RATING <= value <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

    comment = (comment or "").strip() or None
    if comment and len(comment) > MAX_COMMENT_LENGTH:
        raise ValidationError(f"Comment must be at most {MAX_COMMENT_LENGTH} characters")

    # row lock serializes recomputes for this ad (SQLite serializes
    # writers on its own)
    ad = get_ad_or_404(session, ad_id, for_update=True)

    if ad.author_id == rater_id:
        raise ValidationError("You cannot rate your own ad")

    session.exec(_upsert_statement(session, {
        "ad_id": ad.id,
        "user_id": rater_id,
        "rating": value,
        "comment": comment,
        "created_at": datetime.now(timezone.utc),
    }))

    _recompute(session, ad)
    session.commit()
    session.refresh(ad)

    logger.info(
        "Rating %s by %s on ad %s; average %.1f over %d",
        value, rater_id, ad.id, ad.average_rating, ad.rating_count,
    )
    return ad


def remove_rating(session: Session, ad_id, rater_id: str):
    ad = get_ad_or_404(session, ad_id, for_update=True)

    session.exec(
        delete(Rating)
        .where(Rating.ad_id == ad.id)
        .where(Rating.user_id == rater_id)
    )

    _recompute(session, ad)
    session.commit()
    session.refresh(ad)

    return ad


def list_ratings(session: Session, ad_id) -> dict:
    ad = get_ad_or_404(session, ad_id)

    ratings = session.exec(
        select(Rating)
        .where(Rating.ad_id == ad.id)
        .order_by(Rating.created_at)
    ).all()

    return {
        "ratings": [
            {
                "user_id": r.user_id,
                "rating": r.rating,
                "comment": r.comment or "",
                "created_at": r.created_at,
            }
            for r in ratings
        ],
        "average_rating": ad.average_rating or 0,
        "rating_count": ad.rating_count or 0,
    }


def list_user_ratings(session: Session, user_id: str) -> list[dict]:
    results = session.exec(
        select(Rating, Ad)
        .join(Ad, Rating.ad_id == Ad.id)
        .where(Rating.user_id == user_id)
        .order_by(Rating.created_at.desc())
    ).all()

    return [
        {
            "ad_id": str(ad.id),
            "ad_title": ad.title,
            "rating": rating.rating,
            "comment": rating.comment or "",
            "created_at": rating.created_at,
        }
        for rating, ad in results
    ]
