import os
from datetime import datetime, timedelta, timezone

os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.pool import StaticPool
from sqlmodel import Session

from app.db.db import get_session, init_db, make_engine
from app.main import app
from app.models.ad import Ad
from app.models.user import User


@pytest.fixture
def engine():
    engine = make_engine("sqlite://", poolclass=StaticPool)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def users(session):
    people = {
        "alice": User(id="alice", name="Alice", email="alice@campus.edu"),
        "bob": User(id="bob", name="Bob", email="bob@campus.edu"),
        "carol": User(id="carol", name="Carol", email="carol@campus.edu"),
        "admin": User(id="admin", name="Admin", email="admin@campus.edu", role="admin"),
    }
    for user in people.values():
        session.add(user)
    session.commit()
    return people


def make_ad(session, author_id="alice", **overrides):
    fields = {
        "author_id": author_id,
        "title": "Calculus textbook",
        "category": "books",
        "description": "Stewart, 8th edition, a few notes in pencil",
        "price": "R$ 80,00",
        "location": "Library, 2nd floor",
        "available_until": datetime.now(timezone.utc) + timedelta(days=7),
    }
    fields.update(overrides)

    ad = Ad(**fields)
    session.add(ad)
    session.commit()
    session.refresh(ad)
    return ad


@pytest.fixture
def ad(session, users):
    return make_ad(session)


def token_for(user_id, role="user"):
    return jwt.encode({"sub": user_id, "role": role}, os.environ["JWT_SECRET"], algorithm="HS256")


def auth(user_id, role="user"):
    return {"Authorization": f"Bearer {token_for(user_id, role)}"}


@pytest.fixture
def client(engine):
    def _get_session():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_session] = _get_session
    yield TestClient(app)
    app.dependency_overrides.clear()
