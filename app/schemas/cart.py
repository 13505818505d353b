# app/schemas/cart.py
from typing import Any

from sqlmodel import SQLModel, Field

# form_data keys kept in the local snapshot, with their restore defaults
SNAPSHOT_FORM_DEFAULTS: dict[str, str] = {
    "color": "default",
    "size": "medium",
    "style": "classic",
}


class UploadedFile(SQLModel):
    """
    Descriptor of a design stored in the 'starter-pack-files' bucket.

    type/size are unknown for items restored from the local snapshot.
    """

    path: str
    name: str
    type: str | None = None
    size: int | None = None


class CartItem(SQLModel):
    """
    A cart line: one customized starter pack.

    price and price_id are always derived from quantity through the
    price tier table; the store recomputes them on every change.
    """

    id: str
    title: str
    image_url: str = ""
    quantity: int = Field(description="1..3 once stored in the cart")
    price: float
    price_id: str
    form_data: dict[str, Any] = Field(default_factory=dict)
    uploaded_file: UploadedFile | None = None


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    price/price_id are not accepted from callers.
    """

    id: str
    title: str
    image_url: str = ""
    quantity: int = 1
    form_data: dict[str, Any] = Field(default_factory=dict)
    uploaded_file: UploadedFile | None = None


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    Out-of-range values are ignored by the store.
    """

    quantity: int


class StoredFileRef(SQLModel):
    """Trimmed file descriptor kept in the local snapshot (path + name)."""

    path: str
    name: str


class CartSnapshot(SQLModel):
    """
    Storage-reduced projection of a CartItem, the unit written to
    local device storage.
    """

    id: str
    quantity: int
    form_data: dict[str, Any] | None = None
    uploaded_file: StoredFileRef | None = None


class CartSummary(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartItem]
    item_count: int
    total: float
