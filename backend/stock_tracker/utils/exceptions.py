"""
Stock Portfolio Tracker - Custom Exceptions
Application-specific exceptions with HTTP error handling
"""
from typing import Optional, Any, Dict
from fastapi import HTTPException, status


class TrackerException(Exception):
    """Base exception for the Stock Portfolio Tracker."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        message: str = "An error occurred",
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)


# =========================
# Storage Exceptions
# =========================

class StorageError(TrackerException):
    """Storage related errors."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class StorageUnavailableError(StorageError):
    """The database could not be reached. Safe to retry."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE

    def __init__(self, message: str = "Storage unavailable, nothing changed"):
        super().__init__(message=message, code="STORAGE_UNAVAILABLE")


class PersistenceFailedError(StorageError):
    """
    A write failed inside a transaction.

    The transaction has already been rolled back when this is raised, so the
    previously stored collection is intact. The underlying error is kept on
    ``cause`` (and chained as ``__cause__``).
    """

    def __init__(
        self,
        message: str = "Save failed, nothing changed",
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message=message, code="PERSISTENCE_FAILED", details=details)
        self.cause = cause


# =========================
# User Exceptions
# =========================

class UserError(TrackerException):
    """User related errors."""
    pass


class InvalidCredentialsError(UserError):
    """Invalid username or password."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message=message, code="INVALID_CREDENTIALS")


class UserAlreadyExistsError(UserError):
    """Username or email already registered."""

    status_code = status.HTTP_409_CONFLICT

    def __init__(self, message: str = "User already exists"):
        super().__init__(message=message, code="USER_EXISTS")


# =========================
# Trading Exceptions
# =========================

class TradingError(TrackerException):
    """Buy/sell related errors."""
    pass


class PositionNotFoundError(TradingError):
    """Position not found."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Position not found"):
        super().__init__(message=message, code="POSITION_NOT_FOUND")


class WatchlistEntryNotFoundError(TradingError):
    """Watchlist entry not found."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "Watchlist entry not found"):
        super().__init__(message=message, code="WATCHLIST_ENTRY_NOT_FOUND")


class InsufficientSharesError(TradingError):
    """Insufficient shares to sell."""

    def __init__(self, message: str = "Cannot sell more than available quantity"):
        super().__init__(message=message, code="INSUFFICIENT_SHARES")


class InvalidOrderError(TradingError):
    """Invalid buy/sell parameters."""

    def __init__(self, message: str = "Invalid order"):
        super().__init__(message=message, code="INVALID_ORDER")


# =========================
# HTTP Exception Helpers
# =========================

def raise_unauthorized(message: str = "Unauthorized"):
    """Raise 401 Unauthorized exception."""
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=message,
        headers={"WWW-Authenticate": "Bearer"}
    )


def raise_forbidden(message: str = "Forbidden"):
    """Raise 403 Forbidden exception."""
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=message
    )
