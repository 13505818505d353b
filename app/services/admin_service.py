# app/services/admin_service.py
import logging
from typing import Any

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    AdminCustomer,
    AdminOrder,
    CustomerDetail,
    ShippingStatus,
    TrackingUpdate,
)
from app.schemas.user import ShippingAddress
from app.services.auth_service import SessionGate
from app.services.order_service import from_minor_units
from app.services.user_service import ProfileService

logger = logging.getLogger(__name__)


def _upstream_error(detail: str, exc: APIError) -> HTTPException:
    logger.error("%s: %s", detail, exc.message)
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=detail)


def _admin_order(row: dict[str, Any]) -> AdminOrder:
    return AdminOrder.model_validate(
        {**row, "amount_total": from_minor_units(row.get("amount_total"))}
    )


def _admin_customer(row: dict[str, Any]) -> AdminCustomer:
    return AdminCustomer.model_validate(
        {**row, "total_spent": from_minor_units(row.get("total_spent"))}
    )


class AdminService:
    """
    Back-office operations over orders and customers.

    Every call re-checks admin privilege through the session gate
    (a denied session is signed out).

    Shipment status is a free-form enum: any value may follow any other.
    Amounts are returned in major units (the views store cents).
    """

    def __init__(self, repo: OrderRepository, profiles: ProfileService, gate: SessionGate):
        self.repo = repo
        self.profiles = profiles
        self.gate = gate

    # -------- Orders --------

    def list_orders(self) -> list[AdminOrder]:
        self.gate.verify_admin()
        try:
            rows = self.repo.list_admin_orders()
        except APIError as exc:
            raise _upstream_error("Erreur lors du chargement des commandes", exc) from exc
        return [_admin_order(row) for row in rows]

    def update_shipping_status(self, order_id: str, new_status: ShippingStatus) -> ShippingStatus:
        self.gate.verify_admin()
        try:
            self.repo.update_tracking_status(order_id, new_status)
        except APIError as exc:
            raise _upstream_error("Erreur lors de la mise à jour du statut", exc) from exc
        return new_status

    def update_tracking(self, order_id: str, payload: TrackingUpdate) -> TrackingUpdate:
        """
        Upsert carrier details; setting them marks the order as shipped.
        """
        self.gate.verify_admin()
        try:
            self.repo.upsert_tracking(
                order_id,
                {
                    "tracking_number": payload.tracking_number,
                    "carrier": payload.carrier,
                    "estimated_delivery": payload.estimated_delivery,
                    "status": "shipped",
                },
            )
        except APIError as exc:
            raise _upstream_error("Erreur lors de la mise à jour du suivi", exc) from exc
        return payload

    # -------- Customers --------

    def list_customers(self) -> list[AdminCustomer]:
        self.gate.verify_admin()
        try:
            rows = self.repo.list_admin_customers()
        except APIError as exc:
            raise _upstream_error("Erreur lors du chargement des clients", exc) from exc
        return [_admin_customer(row) for row in rows]

    def get_customer(self, customer_id: str) -> CustomerDetail:
        """
        Customer aggregate + saved address + orders, newest first.

        Raises:
            HTTPException(404): unknown customer.
        """
        self.gate.verify_admin()
        try:
            customer = self.repo.get_admin_customer(customer_id)
            orders = self.repo.list_admin_orders(user_id=customer_id) if customer else []
        except APIError as exc:
            raise _upstream_error("Erreur lors du chargement des données client", exc) from exc

        if customer is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Client non trouvé",
            )

        return CustomerDetail(
            **_admin_customer(customer).model_dump(),
            shipping_address=self.profiles.get_shipping_address(customer_id),
            orders=[_admin_order(row) for row in orders],
        )

    def update_customer_address(self, customer_id: str, address: ShippingAddress) -> ShippingAddress:
        self.gate.verify_admin()
        return self.profiles.save_shipping_address(customer_id, address)
