"""Custom exception hierarchy."""


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, original_error: Exception = None):
        super().__init__(message)
        self.message = message
        self.original_error = original_error


class APIClientError(AppError):
    """Raised when an external AI provider call fails."""
    pass


class APITimeoutError(APIClientError):
    """Raised when an external AI provider call times out."""
    pass


class AuthenticationError(APIClientError):
    """Raised when a provider rejects our credentials (HTTP 401)."""
    pass


class DatabaseError(AppError):
    """Raised when a database operation fails."""
    pass


class ValidationError(AppError):
    """Raised when input validation fails."""
    pass


class NotFoundError(AppError):
    """Raised when a requested record does not exist or is not visible."""
    pass


class PermissionDeniedError(AppError):
    """Raised when the caller lacks the permission for an action."""
    pass


class ConflictError(AppError):
    """Raised when an operation would violate a uniqueness rule."""
    pass


class SessionExpiredError(AppError):
    """Raised when a session token is unknown or past its expiry."""
    pass


class InvalidCredentialsError(AppError):
    """Raised when an email/password pair does not match a user."""
    pass
