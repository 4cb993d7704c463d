"""
Error taxonomy shared by the pairing, authentication and player services.

Each error carries the HTTP status it maps to; ``signage.main`` renders them
as ``{"detail": ...}`` the same way FastAPI renders ``HTTPException``.
"""


class SignageError(Exception):
    status_code = 500
    default_detail = "Internal server error"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    @property
    def headers(self) -> dict[str, str] | None:
        return None


class ValidationError(SignageError):
    status_code = 400
    default_detail = "Invalid request"


class Unauthenticated(SignageError):
    status_code = 401
    default_detail = "Unauthorized"

    @property
    def headers(self) -> dict[str, str] | None:
        return {"WWW-Authenticate": "Bearer"}


class Forbidden(SignageError):
    status_code = 403
    default_detail = "Forbidden"


class NotFound(SignageError):
    status_code = 404
    default_detail = "Not found"


class Internal(SignageError):
    status_code = 500
    default_detail = "Internal server error"
