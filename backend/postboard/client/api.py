"""JSON API client used by the client application."""

import httpx

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiError(Exception):
    """The server answered with ``success: false`` or an error status."""

    def __init__(self, message: str, status_code: int, errors: list | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.errors = errors or []

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)


class PostboardClient:
    """Client for the Postboard HTTP API.

    ``http`` may be any ``httpx.Client``; tests pass FastAPI's TestClient.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        prefix: str = "/api",
        http: httpx.Client | None = None,
    ):
        self.prefix = prefix
        self.http = http or httpx.Client(base_url=base_url, timeout=10.0)
        self.token: str | None = None

    def _headers(self) -> dict:
        if self.token:
            return {"Authorization": f"Bearer {self.token}"}
        return {}

    def _request(self, method: str, path: str, json: dict | None = None) -> dict:
        resp = self.http.request(
            method, f"{self.prefix}{path}", json=json, headers=self._headers()
        )
        try:
            data = resp.json()
        except ValueError:
            data = {}
        if resp.is_error or not data.get("success", False):
            raise ApiError(
                data.get("message") or f"Request failed with status {resp.status_code}",
                resp.status_code,
                data.get("errors"),
            )
        return data

    def health(self) -> dict:
        return self._request("GET", "/health")

    def register(self, username: str, password: str) -> dict:
        return self._request(
            "POST", "/auth/register", json={"username": username, "password": password}
        )

    def login(self, username: str, password: str) -> dict:
        return self._request(
            "POST", "/auth/login", json={"username": username, "password": password}
        )

    def verify(self) -> dict:
        return self._request("GET", "/auth/verify")["user"]

    def create_post(self, content: str) -> dict:
        return self._request("POST", "/posts/create", json={"content": content})["post"]

    def list_posts(self) -> list[dict]:
        return self._request("GET", "/posts/all")["posts"]

    def list_user_posts(self, user_id: int) -> list[dict]:
        return self._request("GET", f"/posts/user/{user_id}")["posts"]

    def close(self) -> None:
        self.http.close()
