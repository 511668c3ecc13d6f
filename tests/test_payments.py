import uuid

import pytest
from fastapi.testclient import TestClient

from registrar.core.exceptions import PaymentStateError, PaymentNotFoundError, StudentNotFoundError
from registrar.main import create_app
from registrar.services.enrollment_service import EnrollmentService
from registrar.services.payment_service import PaymentService
from tests.conftest import (
    enrollment_form, make_settings, _create_user, _login, STAFF_PASSWORD, ACCOUNTANT_PASSWORD,
)


def test_settle_pending_payment(session, make_request):
    student = EnrollmentService(session, require_settlement=True).enroll(make_request())
    payments = PaymentService(session)
    [payment] = payments.list_for_student(student.matricule)

    settled = payments.settle(payment.id)

    assert settled.status == "complete"
    assert settled.settled_at is not None

    with pytest.raises(PaymentStateError):
        payments.settle(payment.id)
    with pytest.raises(PaymentStateError):
        payments.cancel(payment.id)


def test_cancel_pending_payment(session, make_request):
    student = EnrollmentService(session, require_settlement=True).enroll(make_request())
    payments = PaymentService(session)
    [payment] = payments.list_for_student(student.matricule)

    assert payments.cancel(payment.id).status == "cancelled"
    with pytest.raises(PaymentStateError):
        payments.settle(payment.id)


def test_default_payments_are_complete(session, make_request):
    student = EnrollmentService(session).enroll(make_request())

    [payment] = PaymentService(session).list_for_student(student.matricule)

    assert payment.status == "complete"
    with pytest.raises(PaymentStateError):
        PaymentService(session).settle(payment.id)


def test_unknown_payment_and_student(session):
    with pytest.raises(PaymentNotFoundError):
        PaymentService(session).settle(uuid.uuid4())
    with pytest.raises(StudentNotFoundError):
        PaymentService(session).list_for_student("000000")


@pytest.fixture
def settlement_client(tmp_path):
    app = create_app(make_settings(tmp_path, PAYMENT_REQUIRE_SETTLEMENT=True))
    with TestClient(app) as client:
        _create_user(app, "secretary1", STAFF_PASSWORD, "secretary")
        _create_user(app, "accountant1", ACCOUNTANT_PASSWORD, "accountant")
        yield client


def test_settlement_endpoints(settlement_client):
    client = settlement_client
    secretary = _login(client, "secretary1", STAFF_PASSWORD)
    accountant = _login(client, "accountant1", ACCOUNTANT_PASSWORD)

    matricule = client.post("/api/enrollments", data=enrollment_form(), headers=secretary).json()["matricule"]

    listed = client.get(f"/api/payments/student/{matricule}", headers=secretary)
    assert listed.status_code == 200
    [payment] = listed.json()
    assert payment["status"] == "pending"
    assert payment["payment_type"] == "enrollment"

    forbidden = client.post(f"/api/payments/{payment['id']}/settle", headers=secretary)
    assert forbidden.status_code == 403

    settled = client.post(f"/api/payments/{payment['id']}/settle", headers=accountant)
    assert settled.status_code == 200
    assert settled.json()["status"] == "complete"
    assert settled.json()["settled_at"] is not None

    again = client.post(f"/api/payments/{payment['id']}/cancel", headers=accountant)
    assert again.status_code == 409

    missing = client.post(f"/api/payments/{uuid.uuid4()}/settle", headers=accountant)
    assert missing.status_code == 404


def test_payments_of_unknown_student(client, auth_headers):
    response = client.get("/api/payments/student/000000", headers=auth_headers)
    assert response.status_code == 404
