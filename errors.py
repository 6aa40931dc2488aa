"""Error taxonomy shared by the auth core and the resource routers.

Every error carries the HTTP status it surfaces as and a short machine
readable ``code``; ``main.py`` turns them into ``{"error", "detail"}`` JSON.
"""

from typing import Optional


class PortalError(Exception):
    status_code = 500
    code = "internal_error"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail()
        super().__init__(self.detail)

    def default_detail(self) -> str:
        return self.code.replace("_", " ").capitalize()


class ValidationError(PortalError):
    status_code = 400
    code = "validation_error"


class NotFound(PortalError):
    status_code = 404
    code = "not_found"


class Conflict(PortalError):
    status_code = 409
    code = "conflict"


class InvalidCredentials(PortalError):
    """Login failure. Unknown identity and wrong password look the same."""

    status_code = 401
    code = "invalid_credentials"

    def __init__(self):
        super().__init__("Invalid credentials")


class Unauthenticated(PortalError):
    status_code = 401
    code = "unauthenticated"


class InvalidToken(Unauthenticated):
    code = "invalid_token"


class TokenExpired(Unauthenticated):
    code = "token_expired"


class Forbidden(PortalError):
    status_code = 403
    code = "forbidden"


class Unavailable(PortalError):
    """Storage fault. Never mapped onto a client error."""

    status_code = 503
    code = "unavailable"


def error_content(exc: PortalError) -> dict:
    """JSON body returned for a PortalError"""
    return {"error": exc.code, "detail": exc.detail}
