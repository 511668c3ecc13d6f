import json
import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select
from starlette.datastructures import UploadFile

from registrar.main import create_app
from registrar.models import Student, Document, Payment
from tests.conftest import enrollment_form, count, make_settings, STAFF_PASSWORD, _create_user, _login

PDF = b"%PDF-1.4\n%fake birth certificate\n"
PNG = b"\x89PNG\r\n\x1a\nfake photo"


def uploaded_files(settings):
    if not os.path.isdir(settings.UPLOAD_DIR):
        return []
    return os.listdir(settings.UPLOAD_DIR)


def test_enrollment_with_documents(client, auth_headers, app_session, settings):
    response = client.post(
        "/api/enrollments",
        data=enrollment_form(services=json.dumps(["transport"]), transport_details='{"zone": "Fann"}'),
        files=[
            ("birth_certificate", ("acte.pdf", PDF, "application/pdf")),
            ("photo", ("awa.png", PNG, "image/png")),
        ],
        headers=auth_headers,
    )

    assert response.status_code == 201, response.text
    assert response.json() == {
        "success": True,
        "matricule": "240001",
        "message": "Enrollment successful",
    }

    student = app_session.execute(select(Student).where(Student.matricule == "240001")).scalar_one()
    documents = app_session.execute(
        select(Document).where(Document.student_id == student.id).order_by(Document.document_type)
    ).scalars().all()
    assert [d.document_type for d in documents] == ["birth_certificate", "photo"]
    assert documents[0].filename == "acte.pdf"
    for document in documents:
        assert os.path.exists(document.path)
        assert os.path.basename(document.path).startswith(document.document_type + "-")

    assert len(uploaded_files(settings)) == 2


def test_enrollment_without_documents(client, auth_headers):
    first = client.post("/api/enrollments", data=enrollment_form(), headers=auth_headers)
    second = client.post("/api/enrollments", data=enrollment_form(first_name="Cheikh"), headers=auth_headers)

    assert first.status_code == 201
    assert first.json()["matricule"] == "240001"
    assert second.json()["matricule"] == "240002"


@pytest.mark.parametrize("files", [
    [("birth_certificate", ("virus.exe", b"MZ...", "application/octet-stream"))],
    [("photo", ("awa.png", PDF, "application/pdf"))],
    [("photo", ("awa.gif", b"GIF89a", "image/gif"))],
    [(f"doc{i}", (f"doc{i}.pdf", PDF, "application/pdf")) for i in range(6)],
], ids=["extension", "mime-mismatch", "gif", "too-many"])
def test_rejected_uploads_write_nothing(client, auth_headers, app_session, settings, files):
    response = client.post("/api/enrollments", data=enrollment_form(), files=files, headers=auth_headers)

    assert response.status_code == 400
    assert count(app_session, Student) == 0
    assert uploaded_files(settings) == []


def test_oversize_upload_is_413(tmp_path):
    settings = make_settings(tmp_path, MAX_FILE_SIZE_MB=1)
    app = create_app(settings)

    with TestClient(app) as client:
        _create_user(app, "secretary1", STAFF_PASSWORD, "secretary")
        headers = _login(client, "secretary1", STAFF_PASSWORD)

        big = b"0" * (1024 * 1024 + 1)
        response = client.post(
            "/api/enrollments",
            data=enrollment_form(),
            files=[("birth_certificate", ("acte.pdf", big, "application/pdf"))],
            headers=headers,
        )

        assert response.status_code == 413
        session = app.state.db.SessionLocal()
        try:
            assert count(session, Student) == 0
        finally:
            session.close()


def test_invalid_form_fields_are_422(client, auth_headers, app_session):
    response = client.post(
        "/api/enrollments",
        data=enrollment_form(first_name="", payment_amount="-5"),
        headers=auth_headers,
    )

    assert response.status_code == 422
    assert count(app_session, Student) == 0


def test_transaction_failure_is_generic_500_and_removes_files(client, auth_headers, app_session, settings):
    response = client.post(
        "/api/enrollments",
        data=enrollment_form(services="[transport"),
        files=[("birth_certificate", ("acte.pdf", PDF, "application/pdf"))],
        headers=auth_headers,
    )

    assert response.status_code == 500
    assert response.json() == {"detail": "Enrollment failed"}
    assert count(app_session, Student) == 0
    assert count(app_session, Payment) == 0
    assert uploaded_files(settings) == []

    retry = client.post("/api/enrollments", data=enrollment_form(), headers=auth_headers)
    assert retry.json()["matricule"] == "240001"


def test_oversize_upload_rejected_before_reading(tmp_path, monkeypatch):
    settings = make_settings(tmp_path, MAX_FILE_SIZE_MB=1)
    app = create_app(settings)

    async def refuse_read(self, size=-1):
        raise AssertionError(f"{self.filename} was read into memory")

    monkeypatch.setattr(UploadFile, "read", refuse_read)

    with TestClient(app) as client:
        _create_user(app, "secretary1", STAFF_PASSWORD, "secretary")
        headers = _login(client, "secretary1", STAFF_PASSWORD)

        response = client.post(
            "/api/enrollments",
            data=enrollment_form(),
            files=[("birth_certificate", ("acte.pdf", b"0" * (2 * 1024 * 1024), "application/pdf"))],
            headers=headers,
        )

        assert response.status_code == 413
        assert "exceeds the 1 MB limit" in response.json()["detail"]
        assert uploaded_files(settings) == []
