# app/services/cart_service.py
import logging

from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from pydantic import ValidationError

from app.core.pricing import clamp_quantity, is_valid_quantity, normalize_quantity, tier_for_quantity
from app.repositories.cart_repo import MAX_CART_ITEMS, LocalCartRepository, RemoteCartRepository
from app.schemas.cart import CartItem, CartItemCreate, CartSummary

logger = logging.getLogger(__name__)


class CartStore:
    """
    The storefront cart: an ordered list of at most 3 line items.

    Two tiers:
      - local (device storage): written synchronously after every
        mutation, read once at construction. Source of truth.
      - remote (user profile): rewritten wholesale after every mutation
        when a session exists, read back by `sync_cart` on sign-in.

    A failed remote write raises HTTPException(502) but the local
    mutation is kept. Remote writes are not serialized against later
    local mutations; last writer wins on the profile row.
    """

    def __init__(self, local: LocalCartRepository, remote: RemoteCartRepository):
        self.local = local
        self.remote = remote
        self._items: list[CartItem] = []
        self.hydrate()

    # ---- internal helpers ----

    @staticmethod
    def _priced(item: CartItem, quantity: int) -> CartItem:
        tier = tier_for_quantity(quantity)
        return item.model_copy(
            update={
                "quantity": quantity,
                "price": tier.price,
                "price_id": tier.price_id,
            }
        )

    def _find(self, item_id: str) -> CartItem | None:
        return next((i for i in self._items if i.id == item_id), None)

    def _get_existing(self, item_id: str) -> CartItem:
        item = self._find(item_id)
        if item is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Article introuvable dans le panier",
            )
        return item

    def _commit(self, items: list[CartItem]) -> None:
        self._items = items[-MAX_CART_ITEMS:]
        self.local.save(self._items)

    def _mirror(self, user_id: str | None) -> None:
        if user_id is None:
            return
        try:
            self.remote.push(user_id, self._items)
        except APIError as exc:
            logger.error("Cart mirror failed for user %s: %s", user_id, exc.message)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors de la synchronisation du panier",
            ) from exc

    def _delete_file(self, item: CartItem) -> bool:
        """Best-effort removal of the item's design from the bucket."""
        if item.uploaded_file is None:
            return False
        try:
            self.remote.delete_file(item.uploaded_file.path)
        except Exception:
            logger.exception("Could not delete %s from storage", item.uploaded_file.path)
        return True

    # ---- public operations ----

    @property
    def items(self) -> list[CartItem]:
        return list(self._items)

    def hydrate(self) -> None:
        """Load the cart from the local tier."""
        self._items = self.local.load()

    def total(self) -> float:
        """
        Sum of the tier price of every line.

        Recomputed from quantity, the stored price field is not trusted.
        """
        return round(sum(tier_for_quantity(i.quantity).price for i in self._items), 2)

    def summary(self) -> CartSummary:
        return CartSummary(
            items=self.items,
            item_count=len(self._items),
            total=self.total(),
        )

    def add_item(self, payload: CartItemCreate) -> CartSummary:
        """
        Add a customized pack to the cart.

        Rules:
          - same id already in cart => quantities are summed (max 3) and
            a new uploaded file replaces the old reference
          - otherwise appended; out-of-range quantity becomes 1
          - only the last 3 items are kept
        """
        user_id = self.remote.current_user_id()
        existing = self._find(payload.id)

        if existing:
            merged = self._priced(existing, clamp_quantity(existing.quantity + payload.quantity))
            if payload.uploaded_file is not None:
                merged = merged.model_copy(update={"uploaded_file": payload.uploaded_file})
            items = [merged if i.id == payload.id else i for i in self._items]
        else:
            quantity = normalize_quantity(payload.quantity)
            tier = tier_for_quantity(quantity)
            new_item = CartItem(
                id=payload.id,
                title=payload.title,
                image_url=payload.image_url,
                quantity=quantity,
                price=tier.price,
                price_id=tier.price_id,
                form_data=payload.form_data,
                uploaded_file=payload.uploaded_file,
            )
            items = [*self._items, new_item]

        self._commit(items)
        self._mirror(user_id)
        return self.summary()

    def remove_item(self, item_id: str) -> CartSummary:
        """
        Remove a line, deleting its uploaded design from storage first.
        """
        user_id = self.remote.current_user_id()
        item = self._get_existing(item_id)
        self._delete_file(item)

        self._commit([i for i in self._items if i.id != item_id])
        self._mirror(user_id)
        return self.summary()

    def update_quantity(self, item_id: str, quantity: int) -> CartSummary:
        """
        Change the quantity of a line. Values outside 1..3 are ignored.
        """
        if not is_valid_quantity(quantity):
            return self.summary()

        user_id = self.remote.current_user_id()
        self._get_existing(item_id)

        self._commit(
            [self._priced(i, quantity) if i.id == item_id else i for i in self._items]
        )
        self._mirror(user_id)
        return self.summary()

    def clear_cart(self) -> int:
        """
        Delete every uploaded design, then empty the cart.

        Returns the number of storage deletes issued.
        """
        user_id = self.remote.current_user_id()
        deleted = sum(1 for item in self._items if self._delete_file(item))

        self._commit([])
        self._mirror(user_id)
        return deleted

    def sync_cart(self) -> bool:
        """
        Replace the local cart with the one stored on the user's profile.

        Runs once per sign-in. Remote wins; failures are logged only.
        Returns True when the local cart was replaced.
        """
        user_id = self.remote.current_user_id()
        if user_id is None:
            return False

        try:
            items = self.remote.fetch(user_id)
        except (APIError, ValidationError):
            logger.exception("Error syncing cart for user %s", user_id)
            return False

        if items is None:
            return False

        self._commit(items)
        return True
