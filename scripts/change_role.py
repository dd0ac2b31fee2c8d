import argparse
import sys

from sqlalchemy import select

from taskboard.db import SessionLocal
from taskboard.models.enums import Role
from taskboard.models.user import User

def change_role(email: str, role_name: str) -> User:
    if not Role.is_known(role_name):
        raise ValueError(f"invalid role: {role_name!r} (expected one of {[r.value for r in Role]})")
    role = Role.parse(role_name)

    db = SessionLocal()
    try:
        user = db.scalar(select(User).where(User.email == email.lower().strip()))
        if user is None:
            raise LookupError(f"no user with email {email}")
        user.role = role.value
        db.commit()
        db.refresh(user)
        return user
    finally:
        db.close()

def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Set a user's role directly in the database.")
    parser.add_argument("email")
    parser.add_argument("role", help=", ".join(r.value for r in Role))
    args = parser.parse_args(argv)

    try:
        user = change_role(args.email, args.role)
    except (ValueError, LookupError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(f"{user.email} is now {user.role}")
    return 0

if __name__ == "__main__":
    sys.exit(main())
