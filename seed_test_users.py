"""
Seed test users for local development

Creates one user per role with the fixed IDs accepted as dev tokens
(dev-token-<id>) when TEST_MODE=true:
1. Admin user
2. Seller user
3. Curator user (already approved, holding the onboarding grant)
4. Client user

Run with: uv run python seed_test_users.py
"""

import os

from dotenv import load_dotenv

# Load environment variables before config reads them
load_dotenv(os.getenv("ENV_FILE", ".env.test"))

from config import load_settings_from_env  # noqa: E402
from database_adapter import DatabaseAdapter, User  # noqa: E402
from services import points  # noqa: E402
from services.auth import DEV_USER_IDS  # noqa: E402

# Profile fields per role; IDs come from the dev-token table
PROFILES = {
    "admin": {"name": "Admin User", "email": "admin@example.com"},
    "seller": {"name": "Seller User", "email": "seller@example.com"},
    "curator": {
        "name": "Curator User",
        "email": "curator@example.com",
        "curator_approved": True,
        "curator_points": points.curator_onboarding_grant(),
    },
    "client": {"name": "Client User", "email": "client@example.com"},
}

test_users = [
    {"id": user_id, "role": role, **PROFILES[role]}
    for user_id, role in DEV_USER_IDS.items()
]


def seed_users():
    """Create or refresh the test users"""
    settings = load_settings_from_env()
    db = DatabaseAdapter(settings)
    db.init()
    print(f"Using database: {settings.DATABASE_URL}")
    print("Creating test users...\n")

    with db.transaction() as session:
        for user_data in test_users:
            existing = session.get(User, user_data["id"])
            if existing:
                # Keep role and metadata in sync with the fixtures
                for key, value in user_data.items():
                    setattr(existing, key, value)
                print(f"  ✓ User {user_data['name']} ({user_data['role']}) already exists, refreshed")
            else:
                session.add(User(**user_data))
                print(f"  ✓ Created {user_data['role']}: {user_data['name']} (ID: {user_data['id']})")

    print("\n✓ Test users setup complete!")
    print("\nTest Accounts:")
    print("-" * 78)
    print(f"{'Role':<10} | {'Email':<22} | {'Dev token'}")
    print("-" * 78)
    for user in test_users:
        print(f"{user['role']:<10} | {user['email']:<22} | dev-token-{user['id']}")
    print("-" * 78)


if __name__ == "__main__":
    seed_users()
