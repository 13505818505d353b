# app/routers/admin.py
from fastapi import APIRouter, Depends

from app.core.auth import get_storefront
from app.schemas.order import (
    AdminCustomer,
    AdminOrder,
    CustomerDetail,
    ShippingStatusUpdate,
    TrackingUpdate,
)
from app.schemas.user import ShippingAddress
from app.storefront import Storefront

router = APIRouter(prefix="/admin", tags=["Admin"])

# Privilege is re-checked by AdminService on every call


# -------- Orders --------


@router.get("/orders", response_model=list[AdminOrder])
def list_orders(storefront: Storefront = Depends(get_storefront)):
    """List all orders, newest first."""
    return storefront.admin.list_orders()


@router.patch("/orders/{order_id}/shipping-status", response_model=ShippingStatusUpdate)
def update_shipping_status(
    order_id: str,
    payload: ShippingStatusUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Set the shipment status (pending, processing, shipped, delivered, returned).
    """
    status = storefront.admin.update_shipping_status(order_id, payload.status)
    return ShippingStatusUpdate(status=status)


@router.put("/orders/{order_id}/tracking", response_model=TrackingUpdate)
def update_tracking(
    order_id: str,
    payload: TrackingUpdate,
    storefront: Storefront = Depends(get_storefront),
):
    """Save tracking number, carrier and ETA; marks the order shipped."""
    return storefront.admin.update_tracking(order_id, payload)


# -------- Customers --------


@router.get("/customers", response_model=list[AdminCustomer])
def list_customers(storefront: Storefront = Depends(get_storefront)):
    return storefront.admin.list_customers()


@router.get("/customers/{customer_id}", response_model=CustomerDetail)
def get_customer(
    customer_id: str,
    storefront: Storefront = Depends(get_storefront),
):
    return storefront.admin.get_customer(customer_id)


@router.put("/customers/{customer_id}/address", response_model=ShippingAddress)
def update_customer_address(
    customer_id: str,
    payload: ShippingAddress,
    storefront: Storefront = Depends(get_storefront),
):
    return storefront.admin.update_customer_address(customer_id, payload)
