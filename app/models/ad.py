from typing import Optional
import uuid
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Ad(SQLModel, table=True):
    __tablename__ = "ads"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # Owner
    author_id: str = Field(foreign_key="users.id", index=True)

    # Listing fields
    title: str
    category: str
    description: str
    price: str  # display string, e.g. "R$ 25,00"
    location: str
    available_until: datetime
    status: str = Field(default="active", index=True)  # "active", "sold", "expired"

    # Derived from the ratings table, rewritten on every rating change
    average_rating: float = Field(default=0)
    rating_count: int = Field(default=0)

    # Promotion
    promotion_active: bool = Field(default=False)
    promotion_label: Optional[str] = Field(default=None)
    promotion_expires_at: Optional[datetime] = Field(default=None)
    original_price: Optional[str] = Field(default=None)
