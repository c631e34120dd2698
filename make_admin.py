"""
Make a user an admin in the production database

Admin is never self-assignable through the API, so the first admin is granted
here, directly against DATABASE_URL.

Usage:
    uv run python make_admin.py <email>

Example:
    uv run python make_admin.py owner@kurasi.id
"""

import sys

from dotenv import load_dotenv

# Load production environment variables
load_dotenv('.env')

from config import load_settings_from_env  # noqa: E402
from database_adapter import DatabaseAdapter  # noqa: E402


def make_admin(db, email: str) -> bool:
    """Give the user registered with this email the admin role"""
    print(f"Looking for user with email: {email}")

    result = db.table("users").select("*").eq("email", email).execute()
    if not result.data:
        print(f"✗ User '{email}' not found in users table.")
        print("\nNote: The user must register a profile (PUT /api/users/<id>) first.")
        return False

    user = result.data[0]
    if user.get('role') == 'admin':
        print(f"✓ User '{email}' is already an admin")
        return True

    db.table("users").update({"role": "admin", "curator_approved": False}).eq("id", user["id"]).execute()
    print(f"✓ Successfully made '{email}' an admin!")
    print(f"  User ID: {user['id']}")
    print(f"  Previous role: {user.get('role')}")
    return True


if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: uv run python make_admin.py <email>")
        sys.exit(1)

    settings = load_settings_from_env()
    if not settings.DATABASE_URL:
        print("Error: DATABASE_URL must be set in .env")
        sys.exit(1)

    success = make_admin(DatabaseAdapter(settings), sys.argv[1])
    sys.exit(0 if success else 1)
