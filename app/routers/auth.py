# app/routers/auth.py
from fastapi import APIRouter, Depends

from app.core.auth import get_storefront, require_admin
from app.schemas.user import AuthResult, Credentials, CurrentUser, SessionRead
from app.storefront import Storefront

router = APIRouter(prefix="/auth", tags=["Auth"])


@router.get("/session", response_model=SessionRead)
def read_session(storefront: Storefront = Depends(get_storefront)):
    """Current identity: guest, customer or admin."""
    return storefront.gate.state()


@router.post("/sign-in", response_model=AuthResult)
def sign_in(
    payload: Credentials,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Customer sign-in.

    Always 200; `success` and the French `message` carry the outcome.
    On success the cart saved on the profile replaces the local one.
    """
    return storefront.gate.sign_in(payload.email, payload.password)


@router.post("/sign-out", response_model=SessionRead)
def sign_out(storefront: Storefront = Depends(get_storefront)):
    storefront.gate.sign_out()
    return storefront.gate.state()


# -------- Admin session --------


@router.post("/admin/sign-in", response_model=AuthResult)
def admin_sign_in(
    payload: Credentials,
    storefront: Storefront = Depends(get_storefront),
):
    """
    Admin sign-in, granted only if the `is_admin` check returns true.
    A denied account is signed out.
    """
    return storefront.gate.admin_login(payload.email, payload.password)


@router.post("/admin/sign-out", response_model=SessionRead)
def admin_sign_out(storefront: Storefront = Depends(get_storefront)):
    storefront.gate.admin_logout()
    return storefront.gate.state()


@router.get("/admin/me", response_model=CurrentUser)
def read_admin(admin: CurrentUser = Depends(require_admin)):
    """Return the admin identity after re-checking the privilege."""
    return admin
