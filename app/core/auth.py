# app/core/auth.py
import time
from typing import Any

from fastapi import Depends, HTTPException, Request, status
from jose import jwt, JWTError

from app.schemas.user import CurrentUser


def token_claims(token: str) -> dict[str, Any]:
    """
    Read the claims of a Supabase access token (JWT) without verifying it.

    The storefront only holds the customer's own token; signature checks
    happen on the Supabase side for every request it makes.

    Raises:
        JWTError: if the token is malformed.
    """
    return jwt.get_unverified_claims(token)


def token_expired(token: str, leeway_seconds: int = 0) -> bool:
    """
    True when the token's `exp` claim is in the past, or the token is
    unreadable. Tokens without `exp` never expire here.
    """
    try:
        claims = token_claims(token)
    except JWTError:
        return True
    exp = claims.get("exp")
    if exp is None:
        return False
    return float(exp) <= time.time() + leeway_seconds


def get_storefront(request: Request):
    """
    FastAPI dependency returning the Storefront built in the app lifespan.

    Usage:

        @router.get("/example")
        def example(storefront: Storefront = Depends(get_storefront)):
            ...
    """
    return request.app.state.storefront


def require_auth(storefront=Depends(get_storefront)) -> CurrentUser:
    """
    Enforce an authenticated customer session.

    Raises:
        HTTPException(401): if nobody is signed in.
    """
    user = storefront.gate.current_user
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Vous devez être connecté pour accéder à cette page",
        )
    return user


def require_admin(storefront=Depends(get_storefront)) -> CurrentUser:
    """
    Enforce admin privileges, re-checked against the database.

    Raises:
        HTTPException(403): if the session is not admin; a session that
        the database no longer recognizes as admin is signed out.
    """
    return storefront.gate.verify_admin()
