import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from app.models.report import Report
from app.services import reports as report_service
from app.services.ads import delete_ad
from app.utils.auth_helper import Principal
from app.utils.errors import ConflictError, NotFoundError, ValidationError
from conftest import make_ad


def test_duplicate_open_report_conflicts_until_resolved(session, ad):
    first = report_service.submit_report(session, ad.id, "bob", "Spam")
    assert first.status == "pending"
    assert (first.ad_title, first.reporter_name, first.reporter_email) == (
        "Calculus textbook", "Bob", "bob@campus.edu",
    )

    with pytest.raises(ConflictError):
        report_service.submit_report(session, ad.id, "bob", "Spam")

    report_service.moderate(session, first.id, "in_review")
    with pytest.raises(ConflictError):
        report_service.submit_report(session, ad.id, "bob", "Scam or fraud")

    report_service.moderate(session, first.id, "resolved", "Talked to the seller")
    second = report_service.submit_report(session, ad.id, "bob", "Spam")
    assert second.id != first.id

    # a different reporter is independent
    report_service.submit_report(session, ad.id, "carol", "Spam")


def test_unique_index_rejects_second_open_report(session, ad):
    report_service.submit_report(session, ad.id, "bob", "Spam")

    # bypass the pre-check the way a racing request would
    session.add(Report(
        ad_id=ad.id,
        reporter_id="bob",
        ad_title=ad.title,
        reporter_name="Bob",
        reporter_email="bob@campus.edu",
        reason="Spam",
    ))
    with pytest.raises(IntegrityError):
        session.commit()
    session.rollback()

    open_reports = session.exec(
        select(Report).where(Report.reporter_id == "bob").where(Report.status != "resolved")
    ).all()
    assert len(open_reports) == 1


def test_blank_reason_is_rejected(session, ad):
    with pytest.raises(ValidationError):
        report_service.submit_report(session, ad.id, "bob", "   ")


def test_missing_ad_or_reporter(session, ad):
    with pytest.raises(NotFoundError):
        report_service.submit_report(session, "5f1c3a52-6a1e-4c4f-9d2e-0d3b8f7e9a11", "bob", "Spam")

    with pytest.raises(NotFoundError):
        report_service.submit_report(session, ad.id, "nobody", "Spam")


def test_forward_transitions(session, ad):
    report = report_service.submit_report(session, ad.id, "bob", "Spam")

    report = report_service.moderate(session, report.id, "in_review")
    assert report.status == "in_review"

    report = report_service.moderate(session, report.id, "resolved")
    assert report.status == "resolved"


def test_pending_can_skip_review(session, ad):
    report = report_service.submit_report(session, ad.id, "bob", "Spam")
    report = report_service.moderate(session, report.id, "resolved")
    assert report.status == "resolved"


@pytest.mark.parametrize("path, illegal", [
    (["resolved"], "pending"),
    (["resolved"], "in_review"),
    (["resolved"], "resolved"),
    (["in_review"], "pending"),
    ([], "pending"),
    ([], "closed"),
])
def test_illegal_transitions(session, ad, path, illegal):
    report = report_service.submit_report(session, ad.id, "bob", "Spam")
    for status in path:
        report = report_service.moderate(session, report.id, status)

    with pytest.raises(ValidationError):
        report_service.moderate(session, report.id, illegal)


def test_notes_only_update_on_resolved_report(session, ad):
    report = report_service.submit_report(session, ad.id, "bob", "Spam")
    report = report_service.moderate(session, report.id, "resolved")
    before = report.updated_at

    report = report_service.moderate(session, report.id, admin_notes="Seller warned")
    assert report.status == "resolved"
    assert report.admin_notes == "Seller warned"
    assert report.updated_at >= before


def test_moderate_unknown_report(session, users):
    with pytest.raises(NotFoundError):
        report_service.moderate(session, 999, "resolved")


def test_reports_survive_ad_deletion(session, ad):
    report = report_service.submit_report(session, ad.id, "bob", "Spam")
    ad_id = ad.id

    delete_ad(session, ad_id, Principal("alice"))

    reports = report_service.list_reports(session)
    assert [r.id for r in reports] == [report.id]
    assert report_service.list_for_ad(session, ad_id, Principal("admin", "admin"))[0].ad_title == "Calculus textbook"

    # still moderatable
    assert report_service.moderate(session, report.id, "resolved").status == "resolved"


def test_list_for_ad_scopes_to_requester(session, ad):
    report_service.submit_report(session, ad.id, "bob", "Spam")
    report_service.submit_report(session, ad.id, "carol", "Other")

    assert {r.reporter_id for r in report_service.list_for_ad(session, ad.id, Principal("bob"))} == {"bob"}
    assert len(report_service.list_for_ad(session, ad.id, Principal("admin", "admin"))) == 2


def test_list_reports_filters_by_status(session, ad):
    other = make_ad(session, title="Old phone")
    first = report_service.submit_report(session, ad.id, "bob", "Spam")
    report_service.submit_report(session, other.id, "bob", "Spam")
    report_service.moderate(session, first.id, "resolved")

    assert [r.id for r in report_service.list_reports(session, "resolved")] == [first.id]
    assert len(report_service.list_reports(session, "pending")) == 1

    with pytest.raises(ValidationError):
        report_service.list_reports(session, "archived")
