import os
from dataclasses import dataclass
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt, JWTError
from sqlmodel import Session

from app.models.user import User
from app.utils.errors import AuthError, NotFoundError

ALGORITHM = "HS256"


@dataclass(frozen=True)
class Principal:
    """A verified (user id, role) pair handed over by the identity provider."""

    user_id: str
    role: str = "user"


def _decode(credentials: str) -> Principal:
    payload = jwt.decode(credentials, os.getenv("JWT_SECRET"), algorithms=[ALGORITHM])

    user_id = payload.get("sub")
    if not user_id:
        raise JWTError("Token has no subject")

    return Principal(user_id=str(user_id), role=payload.get("role", "user"))


bearer_scheme_optional = HTTPBearer(auto_error=False)


def get_current_user_optional(token: HTTPAuthorizationCredentials = Depends(bearer_scheme_optional)):
    if not token:
        return None

    try:
        return _decode(token.credentials)
    except JWTError:
        return None


def get_current_user_required(token: HTTPAuthorizationCredentials = Depends(bearer_scheme_optional)):
    if not token:
        raise AuthError("Not authenticated")

    try:
        return _decode(token.credentials)
    except JWTError:
        raise AuthError("Invalid or expired token")


def is_admin(requester) -> bool:
    return requester is not None and requester.role == "admin"


def can_mutate_ad(requester, ad) -> bool:
    """Owner of the ad or an admin."""
    if requester is None or ad is None:
        return False

    return requester.user_id == ad.author_id or is_admin(requester)


def ensure_can_mutate_ad(requester, ad, action: str = "modify"):
    if not can_mutate_ad(requester, ad):
        raise AuthError(f"Not authorized to {action} this ad", forbidden=True)


def require_admin(principal: Principal = Depends(get_current_user_required)):
    if not is_admin(principal):
        raise AuthError("Admin access required", forbidden=True)
    return principal


def get_db_user(session: Session, principal: Principal) -> User:
    user = session.get(User, principal.user_id)

    if not user:
        raise NotFoundError("User not found")

    return user
