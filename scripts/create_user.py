from __future__ import annotations

import argparse
import getpass
import sys

from sqlalchemy import select

from collabill.auth.passwords import hash_password
from collabill.db import SessionLocal
from collabill.models.enums import Role
from collabill.models.user import User, UserRole

def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="create a collabill user")
    p.add_argument("email")
    p.add_argument("name")
    p.add_argument("--role", choices=[r.value for r in Role], default=Role.COLLABORATOR.value)
    p.add_argument("--password", help="prompted for when omitted")
    return p.parse_args(argv)

def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    password = args.password or getpass.getpass("password: ")
    if len(password) < 8:
        print("password must be at least 8 characters", file=sys.stderr)
        return 2

    email = args.email.lower().strip()
    with SessionLocal() as db:
        if db.scalar(select(User.id).where(User.email == email)) is not None:
            print(f"user already exists: {email}", file=sys.stderr)
            return 1

        user = User(email=email, name=args.name, password_hash=hash_password(password))
        db.add(user)
        db.flush()
        db.add(UserRole(user_id=user.id, role=Role(args.role)))
        db.commit()
        print(f"created {args.role} {email} ({user.id})")
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
