class MarketplaceError(Exception):
    """Base class for errors the API turns into a JSON error response."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(MarketplaceError):
    """Malformed or out-of-range input, or an illegal state transition."""

    status_code = 400


class AuthError(MarketplaceError):
    """Missing credentials (401) or a failed ownership/role check (403)."""

    def __init__(self, message: str, forbidden: bool = False):
        super().__init__(message)
        self.status_code = 403 if forbidden else 401


class NotFoundError(MarketplaceError):
    status_code = 404


class ConflictError(MarketplaceError):
    status_code = 409


class InternalError(MarketplaceError):
    status_code = 500
