from typing import Optional
import uuid
from sqlalchemy import Index, text
from sqlmodel import Field, SQLModel
from datetime import datetime, timezone


class Report(SQLModel, table=True):
    __tablename__ = "reports"

    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    # No foreign key: reports outlive the ad they point at
    ad_id: uuid.UUID = Field(index=True)
    reporter_id: str = Field(foreign_key="users.id")

    # Snapshot taken when the report is filed
    ad_title: str
    reporter_name: str
    reporter_email: str

    # Report fields
    reason: str
    description: Optional[str] = Field(default=None)

    # Status
    status: str = Field(default="pending", index=True)  # "pending", "in_review", "resolved"
    admin_notes: Optional[str] = Field(default=None)

    __table_args__ = (
        # A reporter can have only one open report per ad; resolved ones don't count
        Index(
            "uq_open_report",
            "ad_id",
            "reporter_id",
            unique=True,
            sqlite_where=text("status != 'resolved'"),
            postgresql_where=text("status != 'resolved'"),
        ),
    )
