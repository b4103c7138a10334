from typing import List, Literal, Optional
from datetime import datetime
from fastapi import APIRouter, Depends
from sqlmodel import Session, select, func
from pydantic import BaseModel

from app.db.db import get_session
from app.models.ad import Ad
from app.models.report import Report
from app.models.user import User
from app.services import reports as report_service
from app.utils.auth_helper import Principal, require_admin
from app.utils.errors import NotFoundError, ValidationError
from app.utils.form_validator import AdminUserUpdateRequest, ModerateReportRequest
from app.utils.logger import logger

router = APIRouter()


# Response Models
class UserDetail(BaseModel):
    id: str
    name: str
    email: str
    course: Optional[str]
    period: Optional[str]
    contact: Optional[str]
    room: Optional[str]
    role: str
    status: str
    created_at: datetime
    ads_posted: int
    reports_received: int


class ReportDetail(BaseModel):
    id: int
    ad_id: str
    ad_title: str
    ad_exists: bool
    reporter_id: str
    reporter_name: str
    reporter_email: str
    reason: str
    description: Optional[str]
    status: str
    admin_notes: Optional[str]
    created_at: datetime
    updated_at: datetime


def _report_detail(report: Report, ad_exists: bool) -> ReportDetail:
    return ReportDetail(
        id=report.id,
        ad_id=str(report.ad_id),
        ad_title=report.ad_title,
        ad_exists=ad_exists,
        reporter_id=report.reporter_id,
        reporter_name=report.reporter_name,
        reporter_email=report.reporter_email,
        reason=report.reason,
        description=report.description,
        status=report.status,
        admin_notes=report.admin_notes,
        created_at=report.created_at,
        updated_at=report.updated_at,
    )


@router.get("/reports", response_model=List[ReportDetail])
def get_reports_for_moderation(
    status: Optional[Literal["pending", "in_review", "resolved"]] = None,
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    """All reports, newest first"""
    reports = report_service.list_reports(session, status)

    # the reported ad may be gone; the report is still listed
    ad_ids = {report.ad_id for report in reports}
    existing = set(session.exec(select(Ad.id).where(Ad.id.in_(ad_ids))).all()) if ad_ids else set()

    return [_report_detail(report, report.ad_id in existing) for report in reports]


@router.patch("/reports/{report_id}")
def moderate_report(
    report_id: int,
    payload: ModerateReportRequest,
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    """Move a report forward and/or attach notes"""
    report = report_service.moderate(
        session,
        report_id,
        new_status=payload.status,
        admin_notes=payload.admin_notes,
    )

    ad_exists = session.get(Ad, report.ad_id) is not None
    return {"ok": True, "report": _report_detail(report, ad_exists)}


@router.get("/users", response_model=List[UserDetail])
def get_users_for_management(
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    """Get all users with moderation info"""
    users = session.exec(select(User).order_by(User.created_at)).all()

    user_details = []
    for user in users:
        ads_count = session.exec(
            select(func.count(Ad.id)).where(Ad.author_id == user.id)
        ).one()

        # Reports filed against ads this user still has
        reports_count = session.exec(
            select(func.count(Report.id))
            .join(Ad, Report.ad_id == Ad.id)
            .where(Ad.author_id == user.id)
        ).one()

        user_details.append(UserDetail(
            id=user.id,
            name=user.name,
            email=user.email,
            course=user.course,
            period=user.period,
            contact=user.contact,
            room=user.room,
            role=user.role,
            status=user.status,
            created_at=user.created_at,
            ads_posted=ads_count,
            reports_received=reports_count,
        ))

    # Most reported first
    user_details.sort(key=lambda x: x.reports_received, reverse=True)
    return user_details


@router.patch("/users/{user_id}")
def update_user(
    user_id: str,
    payload: AdminUserUpdateRequest,
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    changes = payload.model_dump(exclude_none=True)
    if not changes:
        raise ValidationError("No fields provided for update")

    for field, value in changes.items():
        setattr(user, field, value)

    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info("User %s updated by admin %s: %s", user.id, admin.user_id, sorted(changes))

    return {"ok": True, "user": user}


@router.delete("/users/{user_id}")
def delete_user(
    user_id: str,
    session: Session = Depends(get_session),
    admin: Principal = Depends(require_admin),
):
    user = session.get(User, user_id)
    if not user:
        raise NotFoundError("User not found")

    session.delete(user)
    session.commit()

    logger.info("User %s deleted by admin %s", user_id, admin.user_id)

    return {"ok": True}
