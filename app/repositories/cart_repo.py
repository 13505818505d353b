# app/repositories/cart_repo.py
import json
import logging
from typing import Any, Callable

from pydantic import ValidationError
from supabase import Client

from app.core.local_storage import STORAGE_ERRORS, LocalStorage
from app.core.pricing import normalize_quantity, tier_for_quantity
from app.core.storage_utils import delete_from_storage
from app.repositories.user_repo import ProfileRepository
from app.schemas.cart import (
    SNAPSHOT_FORM_DEFAULTS,
    CartItem,
    CartSnapshot,
    StoredFileRef,
    UploadedFile,
)

logger = logging.getLogger(__name__)

CART_STORAGE_KEY = "shopping-cart"
CART_STORAGE_VERSION = 1

# Only the most recent items are kept, locally and in memory
MAX_CART_ITEMS = 3


# ---- snapshot projection ----


def to_snapshot(item: CartItem) -> CartSnapshot:
    """Reduce a cart item to the fields worth keeping on the device."""
    form_data = {
        key: item.form_data.get(key)
        for key in SNAPSHOT_FORM_DEFAULTS
        if item.form_data.get(key) is not None
    }
    uploaded_file = None
    if item.uploaded_file is not None:
        uploaded_file = StoredFileRef(
            path=item.uploaded_file.path,
            name=item.uploaded_file.name,
        )
    return CartSnapshot(
        id=item.id,
        quantity=item.quantity,
        form_data=form_data,
        uploaded_file=uploaded_file,
    )


def restore_item(snapshot: CartSnapshot) -> CartItem:
    """
    Rebuild a full cart item from its snapshot.

    Price, price id and title are re-derived from quantity; missing
    form_data keys get their defaults; type/size of the file are lost.
    """
    quantity = normalize_quantity(snapshot.quantity)
    tier = tier_for_quantity(quantity)
    stored_form = snapshot.form_data or {}
    form_data = {
        key: stored_form.get(key) or default
        for key, default in SNAPSHOT_FORM_DEFAULTS.items()
    }
    uploaded_file = None
    if snapshot.uploaded_file is not None:
        uploaded_file = UploadedFile(
            path=snapshot.uploaded_file.path,
            name=snapshot.uploaded_file.name,
        )
    return CartItem(
        id=snapshot.id,
        title=tier.name,
        image_url="",
        quantity=quantity,
        price=tier.price,
        price_id=tier.price_id,
        form_data=form_data,
        uploaded_file=uploaded_file,
    )


# ---- reduction strategies, applied in order until one fits ----


def _full_snapshot(snapshots: list[CartSnapshot]) -> list[dict[str, Any]]:
    return [s.model_dump(exclude_none=True) for s in snapshots]


def _without_files(snapshots: list[CartSnapshot]) -> list[dict[str, Any]]:
    return [
        s.model_dump(exclude_none=True, exclude={"uploaded_file"}) for s in snapshots
    ]


def _id_and_quantity(snapshots: list[CartSnapshot]) -> list[dict[str, Any]]:
    return [{"id": s.id, "quantity": s.quantity} for s in snapshots]


ReductionStrategy = Callable[[list[CartSnapshot]], list[dict[str, Any]]]

REDUCTION_STRATEGIES: list[tuple[str, ReductionStrategy]] = [
    ("full", _full_snapshot),
    ("without_files", _without_files),
    ("id_and_quantity", _id_and_quantity),
]


class LocalCartRepository:
    """
    Local tier of the cart: the device storage document

        {"state": {"items": [<CartSnapshot>...]}, "version": 1}

    Synchronous and authoritative for the running session. Storage
    failures never reach the caller: writes drop precision instead, and
    an unreadable store loads as an empty cart.
    """

    def __init__(self, storage: LocalStorage, key: str = CART_STORAGE_KEY):
        self.storage = storage
        self.key = key

    def _write(self, entries: list[dict[str, Any]]) -> None:
        document = {"state": {"items": entries}, "version": CART_STORAGE_VERSION}
        self.storage.set_item(self.key, json.dumps(document, ensure_ascii=False))

    def save(self, items: list[CartItem]) -> str:
        """
        Persist the cart, shrinking it until the storage accepts it.

        Returns the name of the strategy that succeeded, or "reset" when
        the key-space had to be wiped and an empty cart written.
        """
        snapshots = [to_snapshot(item) for item in items][-MAX_CART_ITEMS:]

        for name, reduce in REDUCTION_STRATEGIES:
            try:
                self._write(reduce(snapshots))
                return name
            except STORAGE_ERRORS as exc:
                logger.warning("Cart save (%s) rejected: %s", name, exc)

        try:
            self.storage.clear()
            self._write([])
        except STORAGE_ERRORS:
            logger.exception("Cart save failed even after clearing local storage")
        return "reset"

    def load(self) -> list[CartItem]:
        """
        Restore the cart from device storage.

        Missing key, unparseable JSON, unexpected shape or another schema
        version all mean an empty cart.
        """
        try:
            raw = self.storage.get_item(self.key)
        except STORAGE_ERRORS:
            logger.exception("Could not read the cart from local storage")
            return []
        if raw is None:
            return []

        try:
            document = json.loads(raw)
        except ValueError:
            logger.warning("Ignoring corrupt cart in local storage")
            return []

        if not isinstance(document, dict):
            return []
        if document.get("version") != CART_STORAGE_VERSION:
            logger.info("Ignoring cart stored with version %r", document.get("version"))
            return []

        state = document.get("state")
        entries = state.get("items") if isinstance(state, dict) else None
        if not isinstance(entries, list):
            return []

        try:
            snapshots = [CartSnapshot.model_validate(entry) for entry in entries]
        except ValidationError:
            logger.warning("Ignoring cart with invalid entries in local storage")
            return []

        return [restore_item(s) for s in snapshots][-MAX_CART_ITEMS:]

    def clear(self) -> None:
        self.storage.remove_item(self.key)


class RemoteCartRepository:
    """
    Remote tier of the cart: `user_profiles.cart_items` for the signed-in
    user, plus the design files in the storage bucket.

    Best-effort backup, rewritten wholesale on every mutation.
    """

    def __init__(self, client: Client, profiles: ProfileRepository, bucket: str):
        self.client = client
        self.profiles = profiles
        self.bucket = bucket

    def current_user_id(self) -> str | None:
        """Id of the user owning the current auth session, if any."""
        session = self.client.auth.get_session()
        if session is None or session.user is None:
            return None
        return str(session.user.id)

    def push(self, user_id: str, items: list[CartItem]) -> None:
        self.profiles.upsert_cart_items(
            user_id, [item.model_dump(mode="json") for item in items]
        )

    def fetch(self, user_id: str) -> list[CartItem] | None:
        """Stored cart items, or None when the profile holds no cart."""
        profile = self.profiles.get(user_id, columns="cart_items")
        if not profile or profile.get("cart_items") is None:
            return None
        return [CartItem.model_validate(raw) for raw in profile["cart_items"]]

    def delete_file(self, path: str) -> None:
        delete_from_storage(self.client, self.bucket, path)
