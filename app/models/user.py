import uuid
from typing import Optional
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class User(SQLModel, table=True):
    __tablename__ = "users"

    # issued by the external identity provider, carried as the token's "sub"
    id: str = Field(default_factory=lambda: uuid.uuid4().hex, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    name: str
    email: str

    # how buyers reach the seller
    course: Optional[str] = None
    period: Optional[str] = None
    contact: Optional[str] = None
    room: Optional[str] = None

    role: str = Field(default="user")  # Possible roles: user, admin
    status: str = Field(default="active")  # Possible values: active, inactive
