# app/services/user_service.py
import logging
from typing import Any

from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from pydantic import ValidationError

from app.repositories.user_repo import ProfileRepository
from app.schemas.user import CurrentUser, ProfileRead, ShippingAddress, address_payload

logger = logging.getLogger(__name__)


def parse_address(raw: dict[str, Any] | None) -> ShippingAddress | None:
    """Stored address, or None when absent or incomplete."""
    if not raw:
        return None
    try:
        return ShippingAddress.model_validate(raw)
    except ValidationError:
        logger.warning("Ignoring incomplete shipping address: %s", raw)
        return None


class ProfileService:
    """
    Business logic for the customer profile (account page, checkout).

    Responsibilities:
      - read/write the saved shipping address
      - map PostgREST failures to user-facing errors
    """

    def __init__(self, repo: ProfileRepository):
        self.repo = repo

    def get_profile(self, current_user: CurrentUser) -> ProfileRead:
        """Return the profile; a user without a row gets an empty one."""
        try:
            row = self.repo.get(current_user.id)
        except APIError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors du chargement du profil. Veuillez réessayer.",
            ) from exc

        return ProfileRead(
            id=current_user.id,
            email=current_user.email,
            shipping_address=parse_address((row or {}).get("shipping_address")),
        )

    def get_shipping_address(self, user_id: str) -> ShippingAddress | None:
        try:
            row = self.repo.get(user_id, columns="shipping_address")
        except APIError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors du chargement de l'adresse",
            ) from exc
        return parse_address((row or {}).get("shipping_address"))

    def save_shipping_address(self, user_id: str, address: ShippingAddress) -> ShippingAddress:
        """
        Overwrite the saved address (whole column, last writer wins).
        """
        try:
            self.repo.upsert_shipping_address(user_id, address_payload(address))
        except APIError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors de l'enregistrement de l'adresse",
            ) from exc
        return address
