# app/routers/checkout.py
from fastapi import APIRouter, Depends

from app.core.auth import get_storefront
from app.schemas.order import CheckoutRedirect, CheckoutRequest
from app.storefront import Storefront

router = APIRouter(prefix="/checkout", tags=["Checkout"])


@router.post("", response_model=CheckoutRedirect)
def checkout(
    payload: CheckoutRequest,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Create the payment session for the current cart.

    Returns the hosted checkout URL the browser must be redirected to.
    Without `shipping_address`, the address saved on the profile is used.
    """
    url = storefront.checkout.proceed_to_checkout(payload.shipping_address)
    return CheckoutRedirect(url=url)
