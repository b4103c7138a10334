from typing import Optional
import uuid
from sqlmodel import Field, SQLModel, UniqueConstraint
from datetime import datetime, timezone


class Favorite(SQLModel, table=True):
    __tablename__ = "favorites"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    user_id: str = Field(foreign_key="users.id", index=True)

    # No foreign key: a favorite of a deleted ad stays until the user removes it
    ad_id: uuid.UUID

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "ad_id",
            name="uq_user_favorite"
        ),
    )
