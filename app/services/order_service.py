# app/services/order_service.py
import logging
import time
from typing import Any, Callable

from fastapi import HTTPException, status
from postgrest.exceptions import APIError

from app.repositories.order_repo import OrderRepository
from app.schemas.order import OrderConfirmation, OrderFile, OrderWithTracking
from app.services.auth_service import SessionGate
from app.services.cart_service import CartStore

logger = logging.getLogger(__name__)

# Order row is written by the payment webhook, possibly after the redirect
ORDER_POLL_RETRIES = 3
ORDER_POLL_DELAY_SECONDS = 2.0


def from_minor_units(amount: int | float | None) -> float:
    """Stripe amounts are in cents."""
    return round((amount or 0) / 100, 2)


class OrderService:
    """
    Customer-facing order views.

    Responsibilities:
      - order history with shipment tracking (one lookup per order)
      - success page: wait for the paid order, then empty the cart
    """

    def __init__(
        self,
        repo: OrderRepository,
        gate: SessionGate,
        cart: CartStore,
        poll_retries: int = ORDER_POLL_RETRIES,
        poll_delay: float = ORDER_POLL_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.repo = repo
        self.gate = gate
        self.cart = cart
        self.poll_retries = poll_retries
        self.poll_delay = poll_delay
        self.sleep = sleep

    def _with_tracking(self, order: dict[str, Any]) -> OrderWithTracking:
        order_id = order["order_id"]
        tracking = self.repo.get_tracking(order_id) or {}
        files = self.repo.get_uploaded_files(order_id)
        return OrderWithTracking(
            id=str(order_id),
            created_at=order.get("order_date"),
            amount_total=from_minor_units(order.get("amount_total")),
            currency=order.get("currency") or "eur",
            status=order.get("order_status") or "pending",
            tracking_number=tracking.get("tracking_number"),
            carrier=tracking.get("carrier"),
            shipping_status=tracking.get("status") or "pending",
            estimated_delivery=tracking.get("estimated_delivery"),
            shipping_address=tracking.get("shipping_address"),
            uploaded_files=[OrderFile.model_validate(f) for f in files if f],
        )

    def list_my_orders(self) -> list[OrderWithTracking]:
        """
        The signed-in customer's orders, newest first, each joined with
        its tracking row and uploaded files (sequential lookups).
        """
        if not self.gate.is_authenticated:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Vous devez être connecté pour voir vos commandes",
            )
        try:
            return [self._with_tracking(o) for o in self.repo.list_user_orders()]
        except APIError as exc:
            logger.error("Error fetching orders: %s", exc.message)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Une erreur est survenue lors du chargement des commandes.",
            ) from exc

    def _fetch_order(self, session_id: str) -> dict[str, Any] | None:
        try:
            return self.repo.get_by_checkout_session(session_id)
        except APIError as exc:
            logger.error("Error fetching order: %s", exc.message)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors de la récupération de la commande",
            ) from exc

    def confirm_checkout(
        self,
        session_id: str | None,
        is_alive: Callable[[], bool] = lambda: True,
    ) -> OrderConfirmation | None:
        """
        Success page: find the order created for a checkout session.

        Steps:
          1. Require a session id and a signed-in user.
          2. Look the order up; if absent, retry `poll_retries` times,
             `poll_delay` seconds apart.
          3. Not found => 404.
          4. Found => clear the cart and return the confirmation.

        `is_alive` is checked after every wait; once it returns False the
        caller is gone and nothing is touched (returns None).
        """
        if not session_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Session de paiement introuvable. Veuillez réessayer votre achat.",
            )
        if not self.gate.is_authenticated:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=(
                    "Votre session a expiré. Veuillez vous reconnecter pour voir "
                    "les détails de votre commande."
                ),
            )

        order = self._fetch_order(session_id)
        attempts = 0
        while order is None and attempts < self.poll_retries:
            attempts += 1
            self.sleep(self.poll_delay)
            if not is_alive():
                return None
            order = self._fetch_order(session_id)

        if not is_alive():
            return None

        if order is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Commande introuvable. Veuillez contacter le support.",
            )

        # The order is paid; a failed profile mirror must not hide it
        try:
            self.cart.clear_cart()
        except HTTPException as exc:
            logger.warning("Cart cleared locally only: %s", exc.detail)

        return OrderConfirmation(
            order_id=str(order["id"]),
            amount_total=from_minor_units(order.get("amount_total")),
            currency=order.get("currency") or "eur",
            created_at=order.get("created_at"),
        )
