from typing import Optional
import uuid
from sqlmodel import Field, SQLModel, UniqueConstraint
from datetime import datetime, timezone


class Rating(SQLModel, table=True):
    __tablename__ = "ratings"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    ad_id: uuid.UUID = Field(foreign_key="ads.id", index=True, ondelete="CASCADE")
    user_id: str = Field(index=True)

    rating: int
    comment: Optional[str] = Field(default=None, max_length=200)

    __table_args__ = (
        # One rating per rater per ad; the upsert targets this constraint
        UniqueConstraint(
            "ad_id",
            "user_id",
            name="uq_ad_user_rating"
        ),
    )
