# registrar/services/bootstrap.py - First-run schema creation and reference data
from decimal import Decimal
from typing import Optional
from sqlalchemy import select
import logging

from registrar.core.config import Settings
from registrar.core.db import DatabaseManager
from registrar.core.security import PasswordManager
from registrar.models import Base
from registrar.models.tariff import Tariff
from registrar.models.user import UserRole
from registrar.services.auth_service import AuthService
from registrar.services.matricule import ensure_counter

logger = logging.getLogger(__name__)

# grade level, enrollment fee, monthly fee, re-enrollment fee
DEFAULT_TARIFFS = [
    ("PPS", 30000, 120000, 20000),
    ("PS", 30000, 120000, 20000),
    ("MS", 30000, 120000, 20000),
    ("GS", 30000, 120000, 20000),
    ("CI", 30000, 130000, 20000),
    ("CP", 30000, 130000, 20000),
    ("CE1", 30000, 130000, 20000),
    ("CE2", 30000, 130000, 20000),
    ("CM1", 30000, 130000, 20000),
    ("CM2", 30000, 130000, 20000),
    ("6eme", 30000, 140000, 20000),
    ("5eme", 30000, 140000, 20000),
    ("4eme", 30000, 140000, 20000),
    ("3eme", 30000, 140000, 20000),
    ("2nd", 30000, 150000, 20000),
    ("Hifz", 30000, 100000, 20000),
]


def seed_tariffs(session) -> int:
    """Insert the tariffs that are missing; existing rows are left untouched"""
    existing = set(session.execute(select(Tariff.grade_level)).scalars())
    added = 0
    for position, (level, enrollment_fee, monthly_fee, re_enrollment_fee) in enumerate(DEFAULT_TARIFFS):
        if level in existing:
            continue
        session.add(Tariff(
            grade_level=level,
            enrollment_fee=Decimal(enrollment_fee),
            monthly_fee=Decimal(monthly_fee),
            re_enrollment_fee=Decimal(re_enrollment_fee),
            position=position,
        ))
        added += 1
    return added


def bootstrap_database(db: DatabaseManager, settings: Settings, create_tables: Optional[bool] = None) -> None:
    """
    Prepare a database for use: tables, tariffs, matricule counter and, only if
    a password was configured for it, the bootstrap admin account.

    Tables are created when ``create_tables`` is true, or when it is left unset
    and AUTO_CREATE_TABLES is on; otherwise migrations are expected to own the schema.
    """
    if create_tables is None:
        create_tables = settings.AUTO_CREATE_TABLES

    if create_tables:
        logger.info("Creating database tables...")
        Base.metadata.create_all(bind=db.engine)

    with db.transaction() as session:
        added = seed_tariffs(session)
        if added:
            logger.info(f"Seeded {added} tariff(s)")
        ensure_counter(session, settings.MATRICULE_BASE)

    if settings.BOOTSTRAP_ADMIN_PASSWORD:
        with db.transaction() as session:
            auth_service = AuthService(session, PasswordManager(settings.BCRYPT_ROUNDS))
            if auth_service.get_by_username(settings.BOOTSTRAP_ADMIN_USERNAME) is None:
                auth_service.create_user(
                    settings.BOOTSTRAP_ADMIN_USERNAME,
                    settings.BOOTSTRAP_ADMIN_PASSWORD,
                    UserRole.ADMIN.value,
                )
                logger.warning(
                    f"Bootstrap admin '{settings.BOOTSTRAP_ADMIN_USERNAME}' created; "
                    "change its password and unset BOOTSTRAP_ADMIN_PASSWORD"
                )
