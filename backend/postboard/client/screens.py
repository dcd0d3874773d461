"""Screen state machines for the feed, login and register views."""

import logging
from datetime import UTC, datetime

import httpx

from postboard.client.api import ApiError
from postboard.client.state import AppState, AuthOutcome
from postboard.client.wallet import WalletConnection

logger = logging.getLogger(__name__)

FEED = "feed"
LOGIN = "login"
REGISTER = "register"

MAX_POST_LENGTH = 280


def resolve_route(state: AppState, requested: str) -> str | None:
    """Return the screen to show for ``requested``, or None while loading."""
    if state.loading:
        return None
    if requested == FEED:
        return FEED if state.is_logged_in else LOGIN
    return FEED if state.is_logged_in else requested


def format_relative_time(created_at: str | datetime, now: datetime | None = None) -> str:
    if isinstance(created_at, str):
        created_at = datetime.fromisoformat(created_at)
    if created_at.tzinfo is None:
        # SQLite can hand timestamps back without an offset; they are UTC
        created_at = created_at.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    seconds = int((now - created_at).total_seconds())
    if seconds < 60:
        return "Just now"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def char_count_level(content: str) -> str:
    if len(content) > 260:
        return "error"
    if len(content) > 240:
        return "warning"
    return "ok"


class FeedScreen:
    LOADING = "loading"
    READY = "ready"

    empty_message = "No posts yet. Be the first to post!"

    def __init__(self, state: AppState, wallet: WalletConnection | None = None):
        self.state = state
        self.wallet = wallet
        self.status = self.LOADING
        self.posts: list[dict] = []
        self._mounted = False

    def mount(self) -> None:
        """Fetch the feed once; later posts are prepended locally."""
        if self._mounted:
            return
        self._mounted = True
        try:
            self.posts = self.state.api.list_posts()
        except ApiError as exc:
            if exc.is_auth_failure:
                self.state.force_logout()
            else:
                self.state.notifier.error("Failed to fetch posts")
        except httpx.HTTPError as exc:
            logger.warning(f"Failed to fetch posts: {exc}")
            self.state.notifier.error("Failed to fetch posts")
        finally:
            self.status = self.READY

    def can_submit(self, content: str) -> bool:
        return bool(content.strip()) and len(content) <= MAX_POST_LENGTH

    def submit_post(self, content: str) -> bool:
        notifier = self.state.notifier
        if not content.strip():
            notifier.error("Please write something before posting")
            return False
        if len(content) > MAX_POST_LENGTH:
            notifier.error("Post must be 280 characters or less")
            return False
        try:
            post = self.state.api.create_post(content)
        except ApiError as exc:
            if exc.is_auth_failure:
                self.state.force_logout()
                return False
            notifier.error(exc.message or "Failed to create post")
            return False
        except httpx.HTTPError as exc:
            logger.warning(f"Failed to create post: {exc}")
            notifier.error("Failed to create post")
            return False
        self.posts.insert(0, post)
        notifier.success("Post created successfully!")
        return True

    def rows(self, now: datetime | None = None) -> list[dict]:
        return [
            {**post, "time": format_relative_time(post["created_at"], now)}
            for post in self.posts
        ]

    def logout(self) -> None:
        self.state.logout()
        if self.wallet and self.wallet.is_connected:
            self.wallet.disconnect()


class AuthScreen:
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILURE = "failure"

    success_message = ""
    fallback_error = ""
    wallet_message = ""
    wallet_success_message = ""

    def __init__(self, state: AppState, wallet: WalletConnection | None = None):
        self.state = state
        self.wallet = wallet
        self.status = self.IDLE
        self.errors: dict[str, str] = {}
        self.error: str | None = None
        self.next_screen: str | None = None

    def clear_field_error(self, field: str) -> None:
        self.errors.pop(field, None)

    def _finish(self, outcome: AuthOutcome, success_message: str) -> bool:
        if outcome.success:
            self.status = self.SUCCESS
            self.error = None
            self.next_screen = FEED
            if success_message:
                self.state.notifier.success(success_message)
            return True
        self.status = self.FAILURE
        self.error = outcome.error or self.fallback_error
        self.state.notifier.error(self.error)
        return False

    def _submit(self, errors: dict[str, str], action) -> bool:
        self.errors = errors
        if errors:
            self.status = self.FAILURE
            return False
        self.status = self.SUBMITTING
        return self._finish(action(), self.success_message)

    def wallet_login(self, now: datetime | None = None) -> bool:
        if self.wallet is None:
            return self._finish(
                AuthOutcome(success=False, error="No wallet available"), ""
            )
        if not self.wallet.is_connected:
            result = self.wallet.connect()
            if not result.success:
                self.status = self.FAILURE
                self.error = result.error
                return False

        self.status = self.SUBMITTING
        stamp = (now or datetime.now(UTC)).isoformat()
        try:
            signature = self.wallet.sign_message(f"{self.wallet_message} at {stamp}")
        except Exception as exc:
            logger.warning(f"Wallet signing failed: {exc}")
            return self._finish(
                AuthOutcome(
                    success=False,
                    error=f"Wallet login failed: {str(exc) or 'Unknown error'}",
                ),
                "",
            )
        outcome = self.state.wallet_login(self.wallet.account, signature)
        return self._finish(outcome, self.wallet_success_message)


class LoginScreen(AuthScreen):
    success_message = "Login successful!"
    fallback_error = "Login failed"
    wallet_message = "Login to Postboard"

    def validate(self, username: str, password: str) -> dict[str, str]:
        errors = {}
        if not username.strip():
            errors["username"] = "Username is required"
        if not password:
            errors["password"] = "Password is required"
        return errors

    def submit(self, username: str, password: str) -> bool:
        return self._submit(
            self.validate(username, password),
            lambda: self.state.login(username, password),
        )


class RegisterScreen(AuthScreen):
    success_message = "Account created successfully!"
    fallback_error = "Registration failed"
    wallet_message = "Register to Postboard"
    wallet_success_message = "Account created with wallet!"

    def validate(self, username: str, password: str, confirm_password: str) -> dict[str, str]:
        errors = {}
        if not username.strip():
            errors["username"] = "Username is required"
        elif len(username) < 3:
            errors["username"] = "Username must be at least 3 characters"
        if not password:
            errors["password"] = "Password is required"
        elif len(password) < 6:
            errors["password"] = "Password must be at least 6 characters"
        if not confirm_password:
            errors["confirm_password"] = "Please confirm your password"
        elif password != confirm_password:
            errors["confirm_password"] = "Passwords do not match"
        return errors

    def submit(self, username: str, password: str, confirm_password: str) -> bool:
        return self._submit(
            self.validate(username, password, confirm_password),
            lambda: self.state.register(username, password),
        )
