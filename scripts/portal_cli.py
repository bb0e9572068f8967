#!/usr/bin/env python3
"""
Operator CLI for the admin portal database

Usage:
    python portal_cli.py init-db
    python portal_cli.py create-user --email admin@example.com --password secret --role admin
    python portal_cli.py check
"""

import asyncio
import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.append(str(Path(__file__).parent.parent / "backend"))

from sqlalchemy.exc import IntegrityError

from portal.core.config import settings
from portal.core.database import Store
from portal.models import User
from portal.services.auth import TokenService


async def init_db(store: Store) -> int:
    await store.init_db()
    print("Schema created")
    return 0


async def create_user(store: Store, email: str, password: str, role: str) -> int:
    tokens = TokenService(settings)
    async with store.session() as db:
        user = User(email=email, password_hash=tokens.hash_password(password), role=role)
        db.add(user)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            print(f"User '{email}' already exists", file=sys.stderr)
            return 1
        await db.refresh(user)
    print(f"Created {role} user '{email}' with ID: {user.id}")
    return 0


async def check(store: Store) -> int:
    healthy = await store.healthcheck()
    print("Database reachable" if healthy else "Database NOT reachable")
    return 0 if healthy else 1


async def main() -> int:
    parser = argparse.ArgumentParser(description="Admin portal operator tasks")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("init-db", help="Create all tables")

    user_parser = subparsers.add_parser("create-user", help="Create a login")
    user_parser.add_argument("--email", required=True)
    user_parser.add_argument("--password", required=True)
    user_parser.add_argument("--role", choices=["client", "admin"], default="admin")

    subparsers.add_parser("check", help="Check database connectivity")

    args = parser.parse_args()

    store = Store(settings)
    await store.open(create_schema=False)
    try:
        if args.command == "init-db":
            return await init_db(store)
        if args.command == "create-user":
            return await create_user(store, args.email, args.password, args.role)
        return await check(store)
    finally:
        await store.close()


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
