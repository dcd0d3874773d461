"""Client application state: who is logged in and with which token."""

import logging
import time

import httpx
from pydantic import BaseModel

from postboard.client.api import ApiError, PostboardClient
from postboard.client.notify import Notifier
from postboard.client.storage import TokenStore

logger = logging.getLogger(__name__)


class AuthOutcome(BaseModel):
    success: bool
    error: str | None = None


class AppState:
    """Explicit session state handed to every screen.

    ``user`` and the token are only changed through the methods below.
    """

    def __init__(
        self,
        api: PostboardClient,
        store: TokenStore,
        notifier: Notifier | None = None,
    ):
        self.api = api
        self.store = store
        self.notifier = notifier or Notifier()
        self.user: dict | None = None
        self.loading = True

    @property
    def token(self) -> str | None:
        return self.api.token

    @property
    def is_logged_in(self) -> bool:
        return self.user is not None

    def _start_session(self, token: str, user: dict) -> None:
        self.store.save(token)
        self.api.token = token
        self.user = user
        self.loading = False

    def _end_session(self) -> None:
        self.store.clear()
        self.api.token = None
        self.user = None
        self.loading = False

    def bootstrap(self) -> None:
        """Restore a stored session, dropping it silently if it no longer verifies."""
        token = self.store.load()
        if token:
            self.api.token = token
            try:
                self.user = self.api.verify()
            except (ApiError, httpx.HTTPError) as exc:
                logger.info(f"Discarding stored session: {exc}")
                self._end_session()
        self.loading = False

    def _authenticate(self, call, fallback: str) -> AuthOutcome:
        try:
            data = call()
        except ApiError as exc:
            return AuthOutcome(success=False, error=exc.message)
        except httpx.HTTPError as exc:
            logger.warning(f"{fallback}: {exc}")
            return AuthOutcome(success=False, error=fallback)
        self._start_session(data["token"], data["user"])
        return AuthOutcome(success=True)

    def login(self, username: str, password: str) -> AuthOutcome:
        return self._authenticate(
            lambda: self.api.login(username, password), "Login failed"
        )

    def register(self, username: str, password: str) -> AuthOutcome:
        return self._authenticate(
            lambda: self.api.register(username, password), "Registration failed"
        )

    def wallet_login(self, account: str, signature: str | None = None) -> AuthOutcome:
        """Log in with a wallet address.

        The session is fabricated locally: the signature is not sent anywhere
        and the placeholder token will be rejected by the server.
        """
        if not account:
            return AuthOutcome(success=False, error="Wallet login failed")
        stamp = int(time.time() * 1000)
        user = {"id": stamp, "username": f"wallet_{account[:8]}"}
        self._start_session(f"wallet_token_{stamp}", user)
        logger.info(f"Wallet session created locally for {account}")
        return AuthOutcome(success=True)

    def logout(self) -> None:
        self._end_session()

    def force_logout(self) -> None:
        """Drop a session the server no longer accepts."""
        logger.info("Session rejected by server, logging out")
        self._end_session()
