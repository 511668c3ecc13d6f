#!/usr/bin/env python3
# scripts/init_db.py - Create the schema, seed reference data and manage staff accounts
import argparse
import getpass
import logging
import os
import sys

# Add the project root to Python path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from registrar.core.config import get_settings
from registrar.core.db import DatabaseManager
from registrar.core.exceptions import DuplicateUserError
from registrar.core.security import PasswordManager
from registrar.models.user import UserRole
from registrar.services.auth_service import AuthService
from registrar.services.bootstrap import bootstrap_database

logger = logging.getLogger("init_db")


def init_schema(db: DatabaseManager, settings, create_tables: bool) -> None:
    print("Initializing database")
    print("=" * 40)
    print(f"Database: {settings.safe_database_url()}")
    bootstrap_database(db, settings, create_tables=create_tables)
    print("Tariffs and matricule counter ready")


def create_user(db: DatabaseManager, settings, username: str, role: str) -> int:
    password = os.environ.get("REGISTRAR_NEW_USER_PASSWORD") or getpass.getpass(f"Password for {username}: ")
    if len(password) < 8:
        print("Password must be at least 8 characters")
        return 1

    session = db.SessionLocal()
    try:
        AuthService(session, PasswordManager(settings.BCRYPT_ROUNDS)).create_user(username, password, role)
    except (DuplicateUserError, ValueError) as e:
        print(f"Could not create user: {e}")
        return 1
    finally:
        session.close()

    print(f"User {username} created with role {role}")
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="School registration database setup")
    sub = parser.add_subparsers(dest="command", required=True)

    init_parser = sub.add_parser("init", help="Create tables and seed tariffs")
    init_parser.add_argument(
        "--no-create-tables",
        action="store_true",
        help="Only seed reference data (schema managed by alembic)",
    )

    user_parser = sub.add_parser("create-user", help="Create a staff account")
    user_parser.add_argument("username")
    user_parser.add_argument(
        "--role",
        default=UserRole.SECRETARY.value,
        choices=[r.value for r in UserRole],
    )

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    db = DatabaseManager(settings)
    db.initialize()
    try:
        if args.command == "init":
            init_schema(db, settings, create_tables=not args.no_create_tables)
            return 0
        return create_user(db, settings, args.username, args.role)
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
