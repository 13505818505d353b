# app/routers/users.py
from fastapi import APIRouter, Depends

from app.core.auth import get_storefront, require_auth
from app.schemas.user import CurrentUser, ProfileRead, ShippingAddress
from app.storefront import Storefront

router = APIRouter(prefix="/account", tags=["Account"])


@router.get("/me", response_model=ProfileRead)
def read_me(
    storefront: Storefront = Depends(get_storefront),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Return the signed-in customer's profile (saved shipping address).
    """
    return storefront.profiles.get_profile(current_user)


@router.put("/me/address", response_model=ShippingAddress)
def save_my_address(
    payload: ShippingAddress,
    storefront: Storefront = Depends(get_storefront),
    current_user: CurrentUser = Depends(require_auth),
):
    """
    Save the shipping address used by default at checkout.
    """
    return storefront.profiles.save_shipping_address(current_user.id, payload)
