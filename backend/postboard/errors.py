"""Error taxonomy shared by the services and the HTTP boundary."""


class PostboardError(Exception):
    """Base error; carries the HTTP status the boundary responds with."""

    status_code = 500
    message = "Server error"

    def __init__(self, message: str | None = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"success": False, "message": self.message}


class ValidationError(PostboardError):
    status_code = 400
    message = "Validation failed"

    def __init__(self, errors: list[dict] | None = None, message: str | None = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.errors:
            body["errors"] = self.errors
        return body


class ConflictError(PostboardError):
    status_code = 400
    message = "Username already exists"


class AuthError(PostboardError):
    status_code = 401
    message = "Invalid credentials"


class TokenRejectedError(AuthError):
    """A token was presented but failed signature, expiry or claims checks."""

    status_code = 403
    message = "Invalid or expired token"


class StorageError(PostboardError):
    status_code = 500
    message = "Database error"
