from datetime import datetime, timedelta, timezone

import pytest

from app.services import promotions as promotion_service
from app.services.ads import serialize_ad
from app.utils.auth_helper import Principal
from app.utils.errors import AuthError, ValidationError

OWNER = Principal("alice")
ADMIN = Principal("admin", "admin")


def test_activation_snapshots_price_once(session, ad):
    ad = promotion_service.activate(session, ad.id, OWNER)
    assert ad.promotion_active is True
    assert ad.promotion_label == "On sale"
    assert ad.original_price == "R$ 80,00"

    ad.price = "R$ 60,00"
    session.add(ad)
    session.commit()

    ad = promotion_service.activate(session, ad.id, OWNER, label="  Last week  ")
    assert ad.promotion_label == "Last week"
    assert ad.original_price == "R$ 80,00"
    assert ad.price == "R$ 60,00"


def test_deactivation_keeps_prices(session, ad):
    promotion_service.activate(session, ad.id, OWNER, expires_at="2030-05-01T12:00:00Z")
    ad.price = "R$ 50,00"
    session.add(ad)
    session.commit()

    ad = promotion_service.deactivate(session, ad.id, ADMIN)
    assert ad.promotion_active is False
    assert ad.promotion_label is None
    assert ad.promotion_expires_at is None
    assert ad.price == "R$ 50,00"
    assert ad.original_price == "R$ 80,00"


def test_expiry_is_parsed_and_normalized(session, ad):
    ad = promotion_service.activate(session, ad.id, OWNER, expires_at="2030-05-01T09:00:00-03:00")
    assert serialize_ad(ad)["promotion_expires_at"] == "2030-05-01T12:00:00+00:00"


def test_invalid_expiry_is_rejected(session, ad):
    with pytest.raises(ValidationError):
        promotion_service.activate(session, ad.id, OWNER, expires_at="next friday")

    session.refresh(ad)
    assert ad.promotion_active is False
    assert ad.original_price is None


def test_only_owner_or_admin_can_promote(session, ad):
    with pytest.raises(AuthError):
        promotion_service.activate(session, ad.id, Principal("bob"))

    with pytest.raises(AuthError):
        promotion_service.deactivate(session, ad.id, Principal("bob"))

    assert promotion_service.activate(session, ad.id, ADMIN).promotion_active


def test_promotion_expiry_is_derived_at_read_time(session, ad):
    past = (datetime.now(timezone.utc) - timedelta(hours=1)).isoformat()
    ad = promotion_service.activate(session, ad.id, OWNER, expires_at=past)

    data = serialize_ad(ad)
    assert data["promotion_active"] is True
    assert data["promotion_expired"] is True

    later = datetime.now(timezone.utc) - timedelta(days=1)
    assert serialize_ad(ad, now=later)["promotion_expired"] is False
