# tests/conftest.py - Shared fixtures: settings, database, app client and staff accounts
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import select, func

from registrar.core.config import Settings
from registrar.core.db import DatabaseManager
from registrar.core.security import PasswordManager
from registrar.main import create_app
from registrar.schemas.enrollment import EnrollmentRequest
from registrar.services.auth_service import AuthService
from registrar.services.bootstrap import bootstrap_database

TEST_SECRET = "test-secret-key-which-is-long-enough-0123456789"
STAFF_PASSWORD = "secretary-pass-1"
ACCOUNTANT_PASSWORD = "accountant-pass-1"


def make_settings(tmp_path, **overrides) -> Settings:
    values = dict(
        ENV="dev",
        DATABASE_URL="sqlite:///:memory:",
        JWT_SECRET=TEST_SECRET,
        BCRYPT_ROUNDS=4,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        LOG_LEVEL="INFO",
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


def enrollment_form(**overrides) -> dict:
    """Flat form fields of a valid enrollment"""
    form = {
        "first_name": "Awa",
        "last_name": "Diop",
        "birth_date": "2017-03-14",
        "sex": "F",
        "nationality": "Senegalese",
        "birthplace": "Dakar",
        "grade_level": "CE1",
        "previous_school": "",
        "blood_group": "O+",
        "medical_conditions": "",
        "medications": "",
        "physician_name": "",
        "guardian1_name": "Moussa Diop",
        "guardian1_phone": "771234567",
        "guardian1_email": "Moussa.Diop@example.com",
        "guardian1_profession": "Teacher",
        "guardian1_address": "Medina, Dakar",
        "guardian1_relation": "father",
        "guardian2_name": "",
        "emergency_name": "Fatou Sow",
        "emergency_phone": "781112233",
        "emergency_relation": "aunt",
        "services": "[]",
        "payment_amount": "30000",
        "payment_mode": "cash",
        "payment_reference": "R-0001",
    }
    form.update(overrides)
    return form


def count(session, model) -> int:
    return session.execute(select(func.count()).select_from(model)).scalar_one()


@pytest.fixture
def settings(tmp_path):
    return make_settings(tmp_path)


@pytest.fixture
def db_manager(settings):
    db = DatabaseManager(settings)
    db.initialize()
    bootstrap_database(db, settings)
    yield db
    db.close()


@pytest.fixture
def session(db_manager):
    session = db_manager.SessionLocal()
    yield session
    session.close()


@pytest.fixture
def make_request():
    def _make(**overrides) -> EnrollmentRequest:
        return EnrollmentRequest.from_form(enrollment_form(**overrides))
    return _make


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


def _create_user(app, username, password, role):
    session = app.state.db.SessionLocal()
    try:
        return AuthService(session, PasswordManager(4)).create_user(username, password, role)
    finally:
        session.close()


def _login(client, username, password) -> dict:
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


@pytest.fixture
def staff_user(client, app):
    return _create_user(app, "secretary1", STAFF_PASSWORD, "secretary")


@pytest.fixture
def auth_headers(client, staff_user):
    return _login(client, "secretary1", STAFF_PASSWORD)


@pytest.fixture
def accountant_headers(client, app):
    _create_user(app, "accountant1", ACCOUNTANT_PASSWORD, "accountant")
    return _login(client, "accountant1", ACCOUNTANT_PASSWORD)


@pytest.fixture
def app_session(client, app):
    """Session on the running app's database, for assertions"""
    session = app.state.db.SessionLocal()
    yield session
    session.close()
