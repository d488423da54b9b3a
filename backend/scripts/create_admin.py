"""
Create Admin Script - Admin accounts are provisioned out-of-band
Run: python -m scripts.create_admin --email admin@example.com --password secret123
"""
import argparse
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from pymongo.database import Database

from mtbm_api.config.settings import get_settings
from mtbm_api.domain.enums import UserRole
from mtbm_api.domain.errors import DomainError
from mtbm_api.domain.models import User
from mtbm_api.repositories.mongo_client import connect, create_indexes, close_connection
from mtbm_api.repositories.user_repo import UserRepository
from mtbm_api.utils.idgen import generate_user_id
from mtbm_api.utils.passwords import hash_password
from mtbm_api.utils.time import utc_now
from mtbm_api.utils.validation import clean, normalize_email, require_password


def create_admin(
    db: Database,
    email: str,
    password: str,
    full_name: str = "Administrator",
    organization: str = "MTBM"
) -> User:
    """
    Insert an admin account

    Raises:
        ValidationError: Bad email or short password
        AlreadyExistsError: An admin with this email already exists
    """
    now = utc_now()
    user = User(
        id=generate_user_id(),
        email=normalize_email(email),
        role=UserRole.ADMIN,
        full_name=clean(full_name) or "Administrator",
        organization=clean(organization) or "MTBM",
        password_hash=hash_password(require_password(password)),
        created_at=now,
        updated_at=now,
    )
    return UserRepository(db).create_user(user)


def main():
    parser = argparse.ArgumentParser(description="Create an MTBM admin account")
    parser.add_argument("--email", required=True, help="Admin email address")
    parser.add_argument("--password", required=True, help="Password (at least 6 characters)")
    parser.add_argument("--name", default="Administrator", help="Full name")
    parser.add_argument("--organization", default="MTBM", help="Organization")
    args = parser.parse_args()

    settings = get_settings()
    client = connect(settings)
    try:
        db = client[settings.mongodb_db]
        create_indexes(db)
        admin = create_admin(db, args.email, args.password, args.name, args.organization)
    except DomainError as e:
        print(f"Could not create admin: {e.message}")
        sys.exit(1)
    finally:
        close_connection(client)

    print("=== Admin Created ===")
    print(f"  ID: {admin.id}")
    print(f"  Email: {admin.email}")


if __name__ == "__main__":
    main()
