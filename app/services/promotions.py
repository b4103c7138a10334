from typing import Optional
from sqlalchemy import func, update
from sqlmodel import Session

from app.models.ad import Ad
from app.services.ads import get_ad_or_404
from app.utils.auth_helper import Principal, ensure_can_mutate_ad
from app.utils.form_validator import parse_timestamp
from app.utils.logger import logger

DEFAULT_LABEL = "On sale"


def activate(
    session: Session,
    ad_id,
    principal: Principal,
    label: Optional[str] = None,
    expires_at: Optional[str] = None,
) -> Ad:
    ad = get_ad_or_404(session, ad_id)
    ensure_can_mutate_ad(principal, ad, "promote")

    values = {
        "promotion_active": True,
        "promotion_label": label.strip() if label and label.strip() else DEFAULT_LABEL,
        # first activation keeps the price it saw; later ones leave it alone
        "original_price": func.coalesce(Ad.original_price, Ad.price),
    }

    if expires_at:
        values["promotion_expires_at"] = parse_timestamp(expires_at, "expiration date")

    session.exec(update(Ad).where(Ad.id == ad.id).values(**values))
    session.commit()
    session.refresh(ad)

    logger.info("Promotion '%s' active on ad %s", ad.promotion_label, ad.id)
    return ad


def deactivate(session: Session, ad_id, principal: Principal) -> Ad:
    ad = get_ad_or_404(session, ad_id)
    ensure_can_mutate_ad(principal, ad, "remove the promotion from")

    # price and original_price stay as they are
    session.exec(
        update(Ad)
        .where(Ad.id == ad.id)
        .values(
            promotion_active=False,
            promotion_label=None,
            promotion_expires_at=None,
        )
    )
    session.commit()
    session.refresh(ad)

    logger.info("Promotion cleared on ad %s", ad.id)
    return ad
