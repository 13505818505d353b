# app/schemas/user.py
from typing import Any

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class ShippingAddress(SQLModel):
    """
    Postal address saved on the user profile and echoed into the
    checkout metadata.

    Validation rules:
      - line1, postal_code, city, country cannot be empty or whitespace
      - optional fields collapse to None when blank
    """

    model_config = ConfigDict(extra="ignore")

    company_name: str | None = None
    line1: str
    line2: str | None = None
    postal_code: str
    city: str
    country: str = "FR"

    @field_validator("line1", "postal_code", "city", "country")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v

    @field_validator("company_name", "line2")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None


class ProfileRead(SQLModel):
    """The current user's profile as shown on the account page."""

    id: str
    email: str | None = None
    shipping_address: ShippingAddress | None = None


class CurrentUser(SQLModel):
    """Identity of the signed-in visitor."""

    id: str
    email: str | None = None


class Credentials(SQLModel):
    """Email/password sign-in payload."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)


class AuthResult(SQLModel):
    """Outcome of a sign-in attempt, message is user-facing (French)."""

    success: bool
    message: str


class SessionRead(SQLModel):
    """Identity gate state exposed to the UI."""

    user: CurrentUser | None = None
    is_authenticated: bool
    is_admin: bool


def address_payload(address: ShippingAddress) -> dict[str, Any]:
    """Serialized address as stored in user_profiles and order metadata."""
    return address.model_dump(exclude_none=True)
