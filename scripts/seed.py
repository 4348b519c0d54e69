"""Seed demo billing profiles and print bearer tokens for them.

Usage:
    python scripts/seed.py
"""
import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from bson import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient

from timesheet_api.config import settings
from timesheet_api.models.user import UserRole
from timesheet_api.utils.auth import create_access_token

PROFILES = [
    {
        "_id": "seed-admin-0001",
        "name": "Demo Admin",
        "email": "admin@example.com",
        "role": UserRole.ADMIN.value,
        "default_hourly_rate": Decimal128("100.00"),
    },
    {
        "_id": "seed-fellow-0002",
        "name": "Demo Fellow",
        "email": "fellow@example.com",
        "role": UserRole.USER.value,
        "default_hourly_rate": Decimal128("75.00"),
    },
]


async def seed():
    """Upsert the demo profiles."""
    client = AsyncIOMotorClient(settings.mongodb_url)
    users = client[settings.mongodb_db_name]["users"]

    for profile in PROFILES:
        await users.replace_one({"_id": profile["_id"]}, profile, upsert=True)
        token = create_access_token(user_id=profile["_id"], role=UserRole(profile["role"]))
        print(f"{profile['name']} ({profile['role']}): {token}")

    client.close()


if __name__ == "__main__":
    asyncio.run(seed())
