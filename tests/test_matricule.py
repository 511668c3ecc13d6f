import threading

import pytest
from sqlalchemy import select

from registrar.core.db import DatabaseManager
from registrar.models import Base, Student
from registrar.models.tariff import MatriculeCounter
from registrar.schemas.enrollment import EnrollmentRequest
from registrar.services.bootstrap import bootstrap_database
from registrar.services.enrollment_service import EnrollmentService
from registrar.services.matricule import allocate_matricule, ensure_counter, COUNTER_NAME
from tests.conftest import make_settings, enrollment_form, count


@pytest.fixture
def bare_db(settings):
    """Schema only: no tariffs, no counter row"""
    db = DatabaseManager(settings)
    db.initialize()
    Base.metadata.create_all(bind=db.engine)
    yield db
    db.close()


def test_first_matricule_follows_base(bare_db):
    with bare_db.transaction() as session:
        assert allocate_matricule(session) == "240001"
    with bare_db.transaction() as session:
        assert allocate_matricule(session) == "240002"


def test_counter_seeded_from_existing_students(bare_db):
    with bare_db.transaction() as session:
        session.add(Student(matricule="240057", first_name="Ali", last_name="Ba", grade_level="CP"))

    with bare_db.transaction() as session:
        assert allocate_matricule(session) == "240058"


def test_rolled_back_allocation_is_reused(bare_db):
    with bare_db.transaction() as session:
        ensure_counter(session)

    session = bare_db.SessionLocal()
    try:
        assert allocate_matricule(session) == "240001"
        session.rollback()
    finally:
        session.close()

    with bare_db.transaction() as session:
        assert allocate_matricule(session) == "240001"
        assert session.get(MatriculeCounter, COUNTER_NAME).last_value == 240001


def test_concurrent_allocations_are_distinct(tmp_path):
    settings = make_settings(tmp_path, DATABASE_URL=f"sqlite:///{tmp_path / 'registrar.db'}")
    db = DatabaseManager(settings)
    db.initialize()
    Base.metadata.create_all(bind=db.engine)
    with db.transaction() as session:
        ensure_counter(session, settings.MATRICULE_BASE)

    issued = []
    errors = []
    lock = threading.Lock()

    def worker():
        try:
            for _ in range(5):
                with db.transaction() as session:
                    value = allocate_matricule(session, settings.MATRICULE_BASE)
                with lock:
                    issued.append(value)
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        assert len(issued) == 40
        assert len(set(issued)) == 40
        assert sorted(int(v) for v in issued) == list(range(240001, 240041))

        with db.transaction() as session:
            last_value = session.execute(
                select(MatriculeCounter.last_value).where(MatriculeCounter.name == COUNTER_NAME)
            ).scalar_one()
        assert last_value == 240040
    finally:
        db.close()


def test_concurrent_enrollments_get_distinct_matricules(tmp_path):
    settings = make_settings(tmp_path, DATABASE_URL=f"sqlite:///{tmp_path / 'enrollments.db'}")
    db = DatabaseManager(settings)
    db.initialize()
    bootstrap_database(db, settings)

    request = EnrollmentRequest.from_form(enrollment_form())
    issued = []
    errors = []
    lock = threading.Lock()

    def worker():
        session = db.SessionLocal()
        try:
            service = EnrollmentService(session, matricule_base=settings.MATRICULE_BASE)
            for _ in range(3):
                student = service.enroll(request)
                with lock:
                    issued.append(student.matricule)
        except Exception as e:
            errors.append(e)
        finally:
            session.close()

    threads = [threading.Thread(target=worker) for _ in range(6)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    try:
        assert errors == []
        assert len(set(issued)) == len(issued) == 18
        with db.transaction() as session:
            assert count(session, Student) == 18
    finally:
        db.close()


def test_allocation_skips_students_inserted_outside_counter(db_manager):
    with db_manager.transaction() as session:
        session.add(Student(matricule="240001", first_name="Ali", last_name="Ba", grade_level="CP"))
        session.add(Student(matricule="240002", first_name="Binta", last_name="Ba", grade_level="CP"))

    request = EnrollmentRequest.from_form(enrollment_form())
    session = db_manager.SessionLocal()
    try:
        service = EnrollmentService(session, matricule_base=240000)
        assert service.enroll(request).matricule == "240003"
        assert service.enroll(request).matricule == "240004"
        assert count(session, Student) == 4
    finally:
        session.close()


def test_ensure_counter_moves_up_to_existing_students(db_manager):
    with db_manager.transaction() as session:
        assert session.get(MatriculeCounter, COUNTER_NAME).last_value == 240000
        session.add(Student(matricule="240010", first_name="Ali", last_name="Ba", grade_level="CP"))

    with db_manager.transaction() as session:
        assert ensure_counter(session).last_value == 240010

    with db_manager.transaction() as session:
        assert allocate_matricule(session) == "240011"
