import pytest
from sqlalchemy import select

from registrar.core.exceptions import StudentNotFoundError, ReEnrollmentError
from registrar.models import Student, Payment, ReEnrollment
from registrar.schemas.enrollment import ReEnrollmentIn
from registrar.services.enrollment_service import EnrollmentService
from registrar.services.reenrollment_service import ReEnrollmentService
from tests.conftest import enrollment_form, count

REENROLL_BODY = {
    "previous_grade_level": "CE1",
    "new_grade_level": "CE2",
    "school_year": "2025-2026",
    "payment": {"amount": "20000", "mode": "cash", "reference": "R-0100"},
}


def test_reenroll_updates_level_and_appends_records(session, make_request):
    student = EnrollmentService(session).enroll(make_request())

    event = ReEnrollmentService(session).reenroll(student.matricule, ReEnrollmentIn(**REENROLL_BODY))

    session.refresh(student)
    assert student.grade_level == "CE2"
    assert event.previous_grade_level == "CE1"
    assert event.new_grade_level == "CE2"
    assert event.school_year == "2025-2026"
    assert count(session, ReEnrollment) == 1

    payments = session.execute(
        select(Payment.payment_type).where(Payment.student_id == student.id).order_by(Payment.payment_type)
    ).scalars().all()
    assert payments == ["enrollment", "re_enrollment"]


def test_unknown_matricule_changes_nothing(session):
    with pytest.raises(StudentNotFoundError):
        ReEnrollmentService(session).reenroll("999999", ReEnrollmentIn(**REENROLL_BODY))

    assert count(session, ReEnrollment) == 0
    assert count(session, Payment) == 0


def test_failed_reenrollment_rolls_back(session, make_request):
    student = EnrollmentService(session).enroll(make_request())
    data = ReEnrollmentIn(**REENROLL_BODY)
    # assignment is not validated; the database check constraint rejects it
    data.payment.amount = -1

    with pytest.raises(ReEnrollmentError):
        ReEnrollmentService(session).reenroll(student.matricule, data)

    session.expire_all()
    assert session.get(Student, student.id).grade_level == "CE1"
    assert count(session, ReEnrollment) == 0
    assert count(session, Payment) == 1


def test_reenroll_endpoint(client, auth_headers, app_session):
    created = client.post("/api/enrollments", data=enrollment_form(), headers=auth_headers)
    matricule = created.json()["matricule"]

    response = client.post(f"/api/re-enrollments/{matricule}", json=REENROLL_BODY, headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Re-enrollment successful"}
    grade = app_session.execute(
        select(Student.grade_level).where(Student.matricule == matricule)
    ).scalar_one()
    assert grade == "CE2"


def test_reenroll_endpoint_unknown_student(client, auth_headers, app_session):
    response = client.post("/api/re-enrollments/123456", json=REENROLL_BODY, headers=auth_headers)

    assert response.status_code == 404
    assert count(app_session, ReEnrollment) == 0


def test_reenroll_endpoint_validates_body(client, auth_headers):
    body = dict(REENROLL_BODY, school_year="")
    response = client.post("/api/re-enrollments/240001", json=body, headers=auth_headers)
    assert response.status_code == 422
