"""
Domain exceptions for the access app.

These represent failed PIN/NFC checks and unusable authorization tokens.
Views convert them to 403 responses; the checkout app maps token errors to
its own discount authorization error.
"""


class AccessServiceError(Exception):
    """Base exception for access service errors."""
    pass


class InvalidAccessCodeError(AccessServiceError):
    """Raised when a PIN or NFC code matches nothing allowed."""
    pass


class AuthorizationTokenError(AccessServiceError):
    """Raised when an authorization token cannot be used."""
    pass


class TokenNotFoundError(AuthorizationTokenError):
    """Raised when the token does not exist."""
    pass


class TokenExpiredError(AuthorizationTokenError):
    """Raised when the token's lifetime has passed."""
    pass


class TokenAlreadyUsedError(AuthorizationTokenError):
    """Raised when a single-use token is presented again."""
    pass
