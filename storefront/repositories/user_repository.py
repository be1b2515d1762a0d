"""
User Repository - keeps the users table in sync with the identity provider

Uses the Supabase client (service role) rather than psycopg2: the row is a
single upsert keyed on clerk_id.
"""
from typing import Optional

from supabase import Client


class UserRepository:
    """Repository for the users table"""

    def __init__(self, client: Client):
        self.client = client

    def upsert(self, clerk_id: str, name: Optional[str] = None) -> dict:
        """
        Insert or update a user by clerk_id

        Args:
            clerk_id: Identity provider user ID
            name: Display name ("Unknown User" when missing)

        Returns:
            The stored row
        """
        response = (
            self.client.table("users")
            .upsert(
                {
                    "clerk_id": clerk_id,
                    "name": name or "Unknown User",
                },
                on_conflict="clerk_id",
                ignore_duplicates=False,
            )
            .execute()
        )
        return response.data[0] if response.data else {}
