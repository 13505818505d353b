# app/services/auth_service.py
import logging

from fastapi import HTTPException, status
from postgrest.exceptions import APIError
from supabase import Client

from app.core.auth import token_expired
from app.schemas.user import AuthResult, CurrentUser, SessionRead
from app.services.cart_service import CartStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid login credentials"


class SessionGate:
    """
    Identity of the storefront visitor: guest, customer or admin.

    Credentials are checked by Supabase Auth; admin privilege by the
    `is_admin` RPC, accepted only when it returns exactly True.

    Responsibilities:
      - track current_user / is_authenticated / is_admin
      - pull the remote cart once per customer sign-in
      - never leave a half-authenticated admin session behind
    """

    def __init__(self, client: Client, cart: CartStore):
        self.client = client
        self.cart = cart
        self.current_user: CurrentUser | None = None
        self.is_admin = False

    # ---- internal helpers ----

    def _set_user(self, user) -> None:
        self.current_user = CurrentUser(id=str(user.id), email=user.email)

    def _reset(self) -> None:
        self.current_user = None
        self.is_admin = False

    def _password_sign_in(self, email: str, password: str):
        response = self.client.auth.sign_in_with_password(
            {"email": email, "password": password}
        )
        return response.user

    def _admin_check(self) -> bool:
        response = self.client.rpc("is_admin").execute()
        return response.data is True

    # ---- public API ----

    @property
    def is_authenticated(self) -> bool:
        return self.current_user is not None

    @property
    def access_token(self) -> str | None:
        """Bearer token of the live session; None if missing or expired."""
        session = self.client.auth.get_session()
        if session is None or not session.access_token:
            return None
        if token_expired(session.access_token):
            return None
        return session.access_token

    def state(self) -> SessionRead:
        return SessionRead(
            user=self.current_user,
            is_authenticated=self.is_authenticated,
            is_admin=self.is_admin,
        )

    def restore(self) -> bool:
        """
        Pick up a session persisted by the auth client (app startup).

        A live customer session triggers a cart sync.
        """
        session = self.client.auth.get_session()
        if session is None or session.user is None:
            self._reset()
            return False
        self._set_user(session.user)
        self.cart.sync_cart()
        return True

    def sign_in(self, email: str, password: str) -> AuthResult:
        """
        Customer sign-in. On success the profile cart replaces the local one.
        """
        try:
            user = self._password_sign_in(email, password)
        except Exception as exc:
            logger.warning("Login error for %s: %s", email, exc)
            if getattr(exc, "message", str(exc)) == INVALID_CREDENTIALS:
                return AuthResult(success=False, message="Email ou mot de passe incorrect")
            return AuthResult(
                success=False,
                message="Une erreur est survenue lors de la connexion",
            )

        if user is None:
            return AuthResult(
                success=False,
                message="Une erreur est survenue lors de la connexion",
            )

        self._set_user(user)
        self.cart.sync_cart()
        return AuthResult(success=True, message="Connexion réussie")

    def sign_out(self) -> None:
        """
        End the session. Local state is reset even if the provider call fails.
        """
        try:
            self.client.auth.sign_out()
        except Exception:
            logger.exception("Logout error")
        finally:
            self._reset()

    def admin_login(self, email: str, password: str) -> AuthResult:
        """
        Admin sign-in.

        Flow:
          1. Password sign-in; failure => "Identifiants invalides".
          2. `is_admin` RPC; anything but True => sign out, "Accès non autorisé".
          3. Grant is_admin.
        """
        try:
            user = self._password_sign_in(email, password)
        except Exception as exc:
            logger.warning("Admin login error for %s: %s", email, exc)
            user = None

        if user is None:
            return AuthResult(success=False, message="Identifiants invalides")

        try:
            allowed = self._admin_check()
        except APIError as exc:
            logger.error("is_admin check failed: %s", exc.message)
            self.sign_out()
            return AuthResult(
                success=False,
                message="Une erreur est survenue lors de la connexion",
            )

        if not allowed:
            self.sign_out()
            return AuthResult(success=False, message="Accès non autorisé")

        self._set_user(user)
        self.is_admin = True
        return AuthResult(success=True, message="Connexion réussie")

    def admin_logout(self) -> None:
        self.is_admin = False
        self.sign_out()

    def verify_admin(self) -> CurrentUser:
        """
        Re-check admin privilege before a back-office operation.

        Raises:
            HTTPException(403): not an admin session, or the database
                denies it (the session is then signed out).
            HTTPException(502): the privilege check itself failed.
        """
        if not self.is_admin or self.current_user is None:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Accès non autorisé. Veuillez vous reconnecter.",
            )

        try:
            allowed = self._admin_check()
        except APIError as exc:
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Erreur lors de la vérification des droits administrateur",
            ) from exc

        if not allowed:
            logger.warning("Database reports user %s is not admin", self.current_user.id)
            self.sign_out()
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Accès non autorisé selon la base de données",
            )

        return self.current_user
