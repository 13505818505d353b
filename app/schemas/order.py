# app/schemas/order.py
from datetime import datetime
from typing import Any, Literal

from pydantic import ConfigDict
from sqlmodel import SQLModel

from app.schemas.user import ShippingAddress

ShippingStatus = Literal["pending", "processing", "shipped", "delivered", "returned"]


class OrderFile(SQLModel):
    """Design attached to an order (as sent in the checkout metadata)."""

    model_config = ConfigDict(extra="ignore")

    path: str | None = None
    name: str | None = None
    type: str | None = None
    url: str | None = None


class OrderWithTracking(SQLModel):
    """
    Customer view of an order joined with its shipment tracking row.

    amount_total is in major units (the backend stores cents).
    """

    id: str
    created_at: datetime | None = None
    amount_total: float
    currency: str
    status: str
    tracking_number: str | None = None
    carrier: str | None = None
    shipping_status: str = "pending"
    estimated_delivery: str | None = None
    shipping_address: dict[str, Any] | None = None
    uploaded_files: list[OrderFile] = []


class OrderConfirmation(SQLModel):
    """What the success page shows once the paid order is found."""

    order_id: str
    amount_total: float
    currency: str
    created_at: datetime | None = None


class AdminOrder(SQLModel):
    """
    Row of the `admin_orders` view.

    bigint ids arrive as numbers; amount_total is in major units.
    """

    model_config = ConfigDict(extra="ignore", coerce_numbers_to_str=True)

    order_id: str
    user_id: str | None = None
    checkout_session_id: str | None = None
    customer_email: str | None = None
    amount_total: float
    currency: str
    payment_status: str | None = None
    order_status: str | None = None
    tracking_number: str | None = None
    carrier: str | None = None
    shipping_status: str | None = None
    order_date: datetime | None = None
    shipping_address: dict[str, Any] | None = None
    uploaded_files: list[OrderFile] | None = None


class AdminCustomer(SQLModel):
    """Row of the `admin_customers` view; total_spent is in major units."""

    model_config = ConfigDict(extra="ignore")

    user_id: str
    email: str | None = None
    stripe_customer_id: str | None = None
    total_orders: int = 0
    total_spent: float = 0
    last_order_date: datetime | None = None


class CustomerDetail(AdminCustomer):
    """Customer with saved address and order history."""

    shipping_address: ShippingAddress | None = None
    orders: list[AdminOrder] = []


class ShippingStatusUpdate(SQLModel):
    """
    Admin payload to change the shipment status.
    Free-form within the enum, no transition rules.
    """

    model_config = ConfigDict(extra="forbid")

    status: ShippingStatus


class TrackingUpdate(SQLModel):
    """Admin payload for carrier tracking details."""

    model_config = ConfigDict(extra="forbid")

    tracking_number: str
    carrier: str
    estimated_delivery: str | None = None


class CheckoutRequest(SQLModel):
    """
    Checkout payload. Without an address the saved one is used.
    """

    model_config = ConfigDict(extra="forbid")

    shipping_address: ShippingAddress | None = None


class CheckoutRedirect(SQLModel):
    url: str
