# app/routers/cart.py
from fastapi import APIRouter, Depends

from app.core.auth import get_storefront
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartSummary
from app.storefront import Storefront

router = APIRouter(prefix="/cart", tags=["Cart"])


@router.get("", response_model=CartSummary)
def get_my_cart(storefront: Storefront = Depends(get_storefront)):
    """
    Get the cart summary.

    Guests have a cart too; it lives in device storage only.
    """
    return storefront.cart.summary()


@router.post("", response_model=CartSummary)
def add_to_cart(
    payload: CartItemCreate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Add a pack to the cart (merged with an existing line of the same id).

    Returns the updated cart summary.
    """
    return storefront.cart.add_item(payload)


@router.patch("/{item_id}", response_model=CartSummary)
def update_cart_item(
    item_id: str,
    payload: CartItemUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Update quantity of a line (1..3, anything else is ignored).

    Returns the updated cart summary.
    """
    return storefront.cart.update_quantity(item_id, payload.quantity)


@router.delete("/{item_id}", response_model=CartSummary)
def remove_cart_item(
    item_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Remove a line and its uploaded design.

    Returns the updated cart summary.
    """
    return storefront.cart.remove_item(item_id)


@router.delete("", response_model=CartSummary)
def clear_cart(storefront: Storefront = Depends(get_storefront)):
    """
    Clear the entire cart.

    Returns an empty cart summary.
    """
    storefront.cart.clear_cart()
    return storefront.cart.summary()
