#!/usr/bin/env python
"""Reset the database schema and seed the bootstrap account."""
from __future__ import annotations

import asyncio
from pathlib import Path
import sys

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.append(str(ROOT_DIR))

from fastapi_users.password import PasswordHelper

from qwksearch.config import load_settings
from qwksearch.infrastructure.database import Base, configure_engine, get_engine
from qwksearch.infrastructure.repositories.user_repo import UserRepository


async def reset_schema() -> None:
    """Drop and recreate all tables defined in the ORM metadata."""

    settings = load_settings()
    configure_engine(settings)
    engine = get_engine()
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)


async def seed_user() -> None:
    """Create the bootstrap account used for local sign-in."""

    settings = load_settings()
    session_factory = configure_engine(settings)

    async with session_factory() as session:  # type: ignore[call-arg]
        user_repo = UserRepository(session)
        email = str(settings.bootstrap.email)
        if await user_repo.get_by_email(email) is not None:
            print(f"Bootstrap user '{email}' already exists.")
            return

        password_hash = PasswordHelper().hash(settings.bootstrap.password)
        await user_repo.create_user(
            email=email,
            hashed_password=password_hash,
            full_name=settings.bootstrap.full_name,
            is_active=True,
            is_verified=True,
        )
        print(f"Seeded bootstrap user '{email}'.")


async def main() -> None:
    """Entrypoint that resets the schema and seeds initial data."""

    await reset_schema()
    await seed_user()


if __name__ == "__main__":
    asyncio.run(main())
