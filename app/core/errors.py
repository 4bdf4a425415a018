from __future__ import annotations


class DomainError(Exception):
    """Base for failures that map onto a structured 4xx response."""

    status_code = 400
    default_detail = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class InvalidCredentials(DomainError):
    """Wrong identifier or wrong password; the two are never told apart."""

    status_code = 401
    default_detail = "Incorrect username or password"


class DuplicateIdentity(DomainError):
    default_detail = "An account with this identifier already exists"


class WeakPassword(DomainError):
    default_detail = "Password does not meet the minimum length"


class InvalidRole(DomainError):
    default_detail = "Unknown role name"


class Unauthorized(DomainError):
    status_code = 401
    default_detail = "Not authenticated"


class Forbidden(DomainError):
    status_code = 403
    default_detail = "Insufficient role permissions"


class NotFound(DomainError):
    status_code = 404
    default_detail = "Resource not found"


class Conflict(DomainError):
    status_code = 409
    default_detail = "Resource is not in a state that allows this operation"


class TokenError(DomainError):
    """Token failures. Kept distinct internally, always collapsed to a deny."""

    status_code = 401
    reason = "invalid"
    default_detail = "Could not validate credentials"


class TokenMalformed(TokenError):
    reason = "malformed"


class TokenBadSignature(TokenError):
    reason = "bad_signature"


class TokenExpired(TokenError):
    reason = "expired"
