from datetime import datetime, timezone

import pytest

from app.models.ad import Ad
from app.utils.auth_helper import Principal, can_mutate_ad, ensure_can_mutate_ad, is_admin
from app.utils.errors import AuthError


AD = Ad(
    author_id="alice",
    title="Desk lamp",
    category="furniture",
    description="Works fine",
    price="R$ 30,00",
    location="Block C",
    available_until=datetime(2030, 1, 1, tzinfo=timezone.utc),
)


def test_owner_and_admin_can_mutate():
    assert can_mutate_ad(Principal("alice"), AD)
    assert can_mutate_ad(Principal("someone-else", "admin"), AD)


def test_other_user_cannot_mutate():
    assert not can_mutate_ad(Principal("bob"), AD)
    assert not can_mutate_ad(None, AD)

    with pytest.raises(AuthError) as exc:
        ensure_can_mutate_ad(Principal("bob"), AD, "delete")
    assert exc.value.status_code == 403


def test_admin_check_ignores_ownership():
    assert is_admin(Principal("bob", "admin"))
    assert not is_admin(Principal("alice"))
    assert not is_admin(None)
