from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.db.db import get_session
from app.services import reports as report_service
from app.utils.auth_helper import Principal, get_current_user_required
from app.utils.form_validator import ReportRequest


router = APIRouter()


@router.post("/ads/{ad_id}/report", status_code=201)
def report_ad(
    ad_id: str,
    payload: ReportRequest,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    report = report_service.submit_report(
        session,
        ad_id,
        current_user.user_id,
        payload.reason,
        payload.description,
    )
    return {"ok": True, "report_id": report.id}


@router.get("/ads/{ad_id}/reports")
def get_ad_reports(
    ad_id: str,
    session: Session = Depends(get_session),
    current_user: Principal = Depends(get_current_user_required),
):
    return report_service.list_for_ad(session, ad_id, current_user)


@router.get("/reports/reasons")
def get_report_reasons():
    return list(report_service.SUGGESTED_REASONS)
