# app/repositories/order_repo.py
from typing import Any

from supabase import Client


def _maybe_single_data(response) -> dict[str, Any] | None:
    # Some client versions return None instead of an empty response
    if response is None:
        return None
    return response.data or None


class OrderRepository:
    """
    Data access layer for the order tables and views written by the
    payment webhook.

    Tables / views:
      - stripe_orders       : one row per paid checkout session
      - stripe_user_orders  : the current user's orders (RLS view)
      - order_tracking      : shipment status per order
      - admin_orders        : all orders joined with tracking (admin view)
      - admin_customers     : customers with order aggregates (admin view)

    NOTE:
      - Row visibility is enforced by RLS; nothing here checks roles.
    """

    def __init__(self, client: Client):
        self.client = client

    # ---- Customer side ----

    def get_by_checkout_session(self, session_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table("stripe_orders")
            .select("*")
            .eq("checkout_session_id", session_id)
            .maybe_single()
            .execute()
        )
        return _maybe_single_data(response)

    def list_user_orders(self) -> list[dict[str, Any]]:
        response = (
            self.client.table("stripe_user_orders")
            .select("*")
            .order("order_date", desc=True)
            .execute()
        )
        return response.data or []

    def get_tracking(self, order_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table("order_tracking")
            .select("*")
            .eq("order_id", order_id)
            .maybe_single()
            .execute()
        )
        return _maybe_single_data(response)

    def get_uploaded_files(self, order_id: str) -> list[dict[str, Any]]:
        response = (
            self.client.table("stripe_orders")
            .select("uploaded_files")
            .eq("id", order_id)
            .maybe_single()
            .execute()
        )
        row = _maybe_single_data(response)
        return (row or {}).get("uploaded_files") or []

    # ---- Admin side ----

    def list_admin_orders(self, user_id: str | None = None) -> list[dict[str, Any]]:
        query = self.client.table("admin_orders").select("*")
        if user_id is not None:
            query = query.eq("user_id", user_id)
        response = query.order("order_date", desc=True).execute()
        return response.data or []

    def list_admin_customers(self) -> list[dict[str, Any]]:
        response = (
            self.client.table("admin_customers")
            .select("*")
            .order("last_order_date", desc=True)
            .execute()
        )
        return response.data or []

    def get_admin_customer(self, user_id: str) -> dict[str, Any] | None:
        response = (
            self.client.table("admin_customers")
            .select("*")
            .eq("user_id", user_id)
            .maybe_single()
            .execute()
        )
        return _maybe_single_data(response)

    def update_tracking_status(self, order_id: str, status: str) -> None:
        self.client.table("order_tracking").update({"status": status}).eq(
            "order_id", order_id
        ).execute()

    def upsert_tracking(self, order_id: str, fields: dict[str, Any]) -> None:
        self.client.table("order_tracking").upsert(
            {"order_id": order_id, **fields}
        ).execute()
