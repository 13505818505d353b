# app/repositories/user_repo.py
from datetime import datetime, timezone
from typing import Any

from supabase import Client

PROFILES_TABLE = "user_profiles"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ProfileRepository:
    """
    Data access layer for the `user_profiles` table.

    One row per auth identity (id = auth.users.id). Writes are upserts
    of whole columns: last writer wins, no optimistic locking.

    Responsibilities:
      - Pure PostgREST calls
      - No FastAPI, no HTTP errors, no business logic
    """

    def __init__(self, client: Client):
        self.client = client

    def get(self, user_id: str, columns: str = "*") -> dict[str, Any] | None:
        """Return the profile row (selected columns), or None if missing."""
        response = (
            self.client.table(PROFILES_TABLE)
            .select(columns)
            .eq("id", user_id)
            .maybe_single()
            .execute()
        )
        # Some client versions return None instead of an empty response
        if response is None:
            return None
        return response.data or None

    def upsert_cart_items(self, user_id: str, cart_items: list[dict[str, Any]]) -> None:
        """Overwrite the stored cart with the given serialized items."""
        self.client.table(PROFILES_TABLE).upsert(
            {
                "id": user_id,
                "cart_items": cart_items,
                "updated_at": _now_iso(),
            }
        ).execute()

    def upsert_shipping_address(self, user_id: str, address: dict[str, Any]) -> None:
        """Overwrite the saved shipping address."""
        self.client.table(PROFILES_TABLE).upsert(
            {
                "id": user_id,
                "shipping_address": address,
                "updated_at": _now_iso(),
            }
        ).execute()
