from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.models.report import Report
from app.models.user import User
from app.services.ads import get_ad_or_404, parse_ad_id
from app.utils.auth_helper import Principal, is_admin
from app.utils.errors import ConflictError, NotFoundError, ValidationError
from app.utils.logger import logger

# Offered by the client; the server accepts any non-empty reason
SUGGESTED_REASONS = (
    "Inappropriate content",
    "Spam",
    "Scam or fraud",
    "Wrong category",
    "Prohibited item",
    "Other",
)


class ReportStatus(str, Enum):
    PENDING = "pending"
    IN_REVIEW = "in_review"
    RESOLVED = "resolved"


OPEN_STATUSES = (ReportStatus.PENDING.value, ReportStatus.IN_REVIEW.value)

# Forward-only; resolved is terminal
TRANSITIONS = {
    ReportStatus.PENDING: {ReportStatus.IN_REVIEW, ReportStatus.RESOLVED},
    ReportStatus.IN_REVIEW: {ReportStatus.RESOLVED},
    ReportStatus.RESOLVED: set(),
}


def check_transition(current: str, new: str) -> ReportStatus:
    try:
        target = ReportStatus(new)
    except ValueError:
        raise ValidationError(f"Invalid status '{new}'")

    if target not in TRANSITIONS[ReportStatus(current)]:
        raise ValidationError(f"Cannot move a report from '{current}' to '{new}'")

    return target


def _find_open_report(session: Session, ad_id, reporter_id: str) -> Optional[Report]:
    return session.exec(
        select(Report)
        .where(Report.ad_id == ad_id)
        .where(Report.reporter_id == reporter_id)
        .where(Report.status.in_(OPEN_STATUSES))
    ).first()


def submit_report(
    session: Session,
    ad_id,
    reporter_id: str,
    reason: str,
    description: Optional[str] = None,
) -> Report:
    if not isinstance(reason, str) or not reason.strip():
        raise ValidationError("A reason is required")

    ad = get_ad_or_404(session, ad_id)

    reporter = session.get(User, reporter_id)
    if not reporter:
        raise NotFoundError("User not found")

    # friendly error for the common case; the partial unique index settles races
    if _find_open_report(session, ad.id, reporter_id):
        raise ConflictError("You already have an open report for this ad")

    report = Report(
        ad_id=ad.id,
        reporter_id=reporter_id,
        ad_title=ad.title,
        reporter_name=reporter.name,
        reporter_email=reporter.email,
        reason=reason.strip(),
        description=(description or "").strip() or None,
    )

    session.add(report)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise ConflictError("You already have an open report for this ad")

    session.refresh(report)

    logger.info("Report %s filed by %s against ad %s", report.id, reporter_id, ad.id)
    return report


def moderate(
    session: Session,
    report_id: int,
    new_status: Optional[str] = None,
    admin_notes: Optional[str] = None,
) -> Report:
    report = session.get(Report, report_id)
    if not report:
        raise NotFoundError("Report not found")

    previous = report.status

    if new_status is not None:
        report.status = check_transition(report.status, new_status).value

    if admin_notes is not None:
        report.admin_notes = admin_notes

    report.updated_at = datetime.now(timezone.utc)

    session.add(report)
    session.commit()
    session.refresh(report)

    if report.status != previous:
        logger.info("Report %s moved from %s to %s", report.id, previous, report.status)

    return report


def list_reports(session: Session, status: Optional[str] = None) -> list[Report]:
    query = select(Report).order_by(Report.created_at.desc())

    if status:
        try:
            query = query.where(Report.status == ReportStatus(status).value)
        except ValueError:
            raise ValidationError(f"Invalid status '{status}'")

    return session.exec(query).all()


def list_for_ad(session: Session, ad_id, requester: Principal) -> list[Report]:
    """Reports filed against an ad, which may already be deleted."""
    query = (
        select(Report)
        .where(Report.ad_id == parse_ad_id(ad_id))
        .order_by(Report.created_at.desc())
    )

    if not is_admin(requester):
        query = query.where(Report.reporter_id == requester.user_id)

    return session.exec(query).all()
