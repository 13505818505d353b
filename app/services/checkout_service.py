# app/services/checkout_service.py
import json
import logging
from typing import Any

import requests
from fastapi import HTTPException, status
from supabase import Client

from app.core.config import Settings
from app.core.storage_utils import public_url
from app.schemas.cart import CartItem
from app.schemas.user import ShippingAddress, address_payload
from app.services.auth_service import SessionGate
from app.services.cart_service import CartStore
from app.services.user_service import ProfileService

logger = logging.getLogger(__name__)

# Placeholder substituted by Stripe when redirecting back
CHECKOUT_SESSION_PLACEHOLDER = "{CHECKOUT_SESSION_ID}"

DEFAULT_CHECKOUT_ERROR = "Erreur lors de la création de la session de paiement"


class CheckoutService:
    """
    Payment initiation through the `stripe-checkout` edge function.

    The function creates the Stripe Checkout Session server-side; we only
    send line items (price id + quantity) and metadata, then hand back the
    hosted checkout URL. No retries.
    """

    def __init__(
        self,
        client: Client,
        http: requests.Session,
        gate: SessionGate,
        cart: CartStore,
        profiles: ProfileService,
        settings: Settings,
    ):
        self.client = client
        self.http = http
        self.gate = gate
        self.cart = cart
        self.profiles = profiles
        self.settings = settings

    # ---- internal helpers ----

    @property
    def endpoint(self) -> str:
        base = self.settings.SUPABASE_URL.rstrip("/")
        return f"{base}/functions/v1/{self.settings.CHECKOUT_FUNCTION}"

    def _files_with_urls(self, items: list[CartItem]) -> list[dict[str, Any] | None]:
        """Uploaded file descriptors, each completed with its public URL."""
        files: list[dict[str, Any] | None] = []
        for item in items:
            if item.uploaded_file is None:
                files.append(None)
                continue
            descriptor = item.uploaded_file.model_dump(exclude_none=True)
            descriptor["url"] = public_url(
                self.client, self.settings.STORAGE_BUCKET, item.uploaded_file.path
            )
            files.append(descriptor)
        return files

    def build_payload(self, items: list[CartItem], address: ShippingAddress) -> dict[str, Any]:
        site = self.settings.SITE_URL.rstrip("/")
        return {
            "line_items": [
                {"price": item.price_id, "quantity": item.quantity} for item in items
            ],
            "mode": "payment",
            "success_url": f"{site}/success?session_id={CHECKOUT_SESSION_PLACEHOLDER}",
            "cancel_url": f"{site}/cancel",
            "shipping_address_collection": {
                "allowed_countries": list(self.settings.ALLOWED_COUNTRIES),
            },
            "metadata": {
                "shipping_address": json.dumps(address_payload(address), ensure_ascii=False),
                "uploaded_files": json.dumps(self._files_with_urls(items), ensure_ascii=False),
            },
        }

    # ---- public operations ----

    def create_checkout_session(self, items: list[CartItem], address: ShippingAddress) -> str:
        """
        Create the payment session and return the hosted checkout URL.

        Raises:
            HTTPException(401): no live session token (no request is sent).
            HTTPException(400): empty cart.
            HTTPException(502): the function answered with an error; its
                body is the detail. A success reply without a JSON `url`
                is a 502 too.
        """
        token = self.gate.access_token
        if not token:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Vous devez être connecté pour effectuer un paiement",
            )
        if not items:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Votre panier est vide",
            )

        payload = self.build_payload(items, address)
        try:
            response = self.http.post(
                self.endpoint,
                json=payload,
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {token}",
                },
                timeout=self.settings.HTTP_TIMEOUT_SECONDS,
            )
        except requests.RequestException as exc:
            logger.error("Error creating checkout session: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=f"{DEFAULT_CHECKOUT_ERROR}. Veuillez réessayer plus tard.",
            ) from exc

        if not response.ok:
            logger.error("Checkout function returned %s: %s", response.status_code, response.text)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail=response.text or DEFAULT_CHECKOUT_ERROR,
            )

        try:
            body = response.json()
        except ValueError:
            logger.error("Checkout function returned a non-JSON body: %s", response.text)
            body = None

        url = body.get("url") if isinstance(body, dict) else None
        if not url:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Aucune URL de paiement reçue",
            )
        return url

    def proceed_to_checkout(self, address: ShippingAddress | None = None) -> str:
        """
        Checkout the current cart with the given address, or the saved one.
        """
        user = self.gate.current_user
        if user is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Vous devez être connecté pour effectuer un paiement",
            )

        if address is None:
            address = self.profiles.get_shipping_address(user.id)
        if address is None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Veuillez renseigner une adresse de livraison complète",
            )

        return self.create_checkout_session(self.cart.items, address)
