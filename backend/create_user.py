"""Create a staff or admin account from the command line.

Signup only ever creates students, so staff and admin accounts are seeded
here.

Usage:
    python -m backend.create_user --username admin --email admin@example.com --password secret --role admin
"""
import argparse
import sys

from sqlalchemy import or_

from backend.auth.passwords import hash_password
from backend.database import SessionLocal, create_tables
from backend.models.user import USER_ROLES, User


def create_user(username: str, email: str, password: str, role: str) -> User:
    create_tables()
    db = SessionLocal()
    try:
        existing = db.query(User).filter(
            or_(User.username == username, User.email == email),
        ).first()
        if existing:
            raise ValueError(f"User '{username}' or '{email}' already exists.")

        user = User(
            username=username,
            email=email,
            hashed_password=hash_password(password),
            role=role,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Create a staff or admin account")
    parser.add_argument("--username", required=True)
    parser.add_argument("--email", required=True)
    parser.add_argument("--password", required=True)
    parser.add_argument("--role", default="admin", choices=[role for role in USER_ROLES if role != "student"])
    args = parser.parse_args(argv)

    try:
        user = create_user(args.username, args.email, args.password, args.role)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        sys.exit(1)
    print(f"Created {user.role} '{user.username}' (id {user.id})")


if __name__ == "__main__":
    main()
