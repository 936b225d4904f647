"""Create the first admin account, or promote an existing user to admin.

The admin API (POST /users/make-admin) needs an admin session, so the very
first admin has to be bootstrapped from the command line.

Needs MONGO_URL and JWT_SECRET_KEY (the shared settings validate it) in the
environment or a .env file.

Usage:
    PYTHONPATH=src python src/scripts/create_admin.py --email admin@example.com --password 'secret123'
    PYTHONPATH=src python src/scripts/create_admin.py --email someone@example.com --promote
"""

import argparse
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from adapter.mongodb.connection import get_database_name, get_mongodb_client
from adapter.mongodb.indexes import ensure_all_indexes
from adapter.mongodb.user_repository import MongoUserRepository
from domain.model.errors import DomainError
from domain.model.user import Role
from port.user_repository import UserRepository
from services import auth_service, user_service
from utils.logging import setup_structured_logging

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or promote an admin user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", help="Required when creating a new account")
    parser.add_argument("--first-name", default="Super")
    parser.add_argument("--last-name", default="Admin")
    parser.add_argument("--username", default="superadmin")
    parser.add_argument("--phone")
    parser.add_argument(
        "--promote",
        action="store_true",
        help="Only promote an existing user; never create one",
    )
    return parser.parse_args(argv)


def create_or_promote(repo: UserRepository, args: argparse.Namespace) -> str:
    """Return a one-line summary of what was done. Raises DomainError on failure."""
    existing = repo.get_by_email(args.email.strip().lower())
    if existing or args.promote:
        user = user_service.make_admin(repo, args.email)
        return f"Promoted {user.email} to admin"

    if not args.password:
        raise DomainError("--password is required to create a new admin")

    user = auth_service.register(
        repo,
        auth_service.Registration(
            first_name=args.first_name,
            last_name=args.last_name,
            username=args.username,
            email=args.email,
            phone=args.phone,
            password=args.password,
        ),
        role=Role.ADMIN,
    )
    return f"Created admin {user.email} (id={user.id})"


def main(argv: list[str] | None = None) -> int:
    setup_structured_logging()
    args = parse_args(argv)

    try:
        client = get_mongodb_client()
    except ValueError as e:
        logger.error("Invalid configuration", extra={"error": str(e)})
        return 1
    if client is None:
        logger.error("MongoDB unavailable; check MONGO_URL")
        return 1

    db = client[get_database_name()]
    ensure_all_indexes(db)

    try:
        summary = create_or_promote(MongoUserRepository(db), args)
    except DomainError as e:
        logger.error("Admin bootstrap failed", extra={"error": str(e)})
        return 1

    logger.info(summary, extra={"email": args.email})
    return 0


if __name__ == "__main__":
    sys.exit(main())
