# app/routers/orders.py
from typing import Callable

import anyio
from fastapi import APIRouter, Depends, Request

from app.core.auth import get_storefront
from app.schemas.order import OrderConfirmation, OrderWithTracking
from app.storefront import Storefront

router = APIRouter(prefix="/orders", tags=["Orders"])


def connection_alive(request: Request) -> Callable[[], bool]:
    """
    Liveness check for a sync endpoint: True while the client is still
    connected. Must be called from the endpoint's worker thread.
    """

    def is_alive() -> bool:
        return not anyio.from_thread.run(request.is_disconnected)

    return is_alive


@router.get("/me", response_model=list[OrderWithTracking])
def list_my_orders(storefront: Storefront = Depends(get_storefront)):
    """
    List the signed-in customer's orders with shipment tracking.
    """
    return storefront.orders.list_my_orders()


@router.get("/success", response_model=OrderConfirmation | None)
def confirm_order(
    request: Request,
    session_id: str | None = None,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Success redirect target: wait for the paid order, then empty the cart.

    A GET because the payment page redirects the browser here. A client
    that disconnects while the order is awaited leaves the cart untouched.
    """
    return storefront.orders.confirm_checkout(
        session_id, is_alive=connection_alive(request)
    )
