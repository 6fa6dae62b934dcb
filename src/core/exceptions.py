"""Custom exceptions and error codes."""

from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the API."""

    # Authentication errors (401)
    UNAUTHORIZED = "UNAUTHORIZED"
    INVALID_TOKEN = "INVALID_TOKEN"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"

    # Authorization errors (403)
    FORBIDDEN = "FORBIDDEN"

    # Not found errors (404)
    ORDER_NOT_FOUND = "ORDER_NOT_FOUND"
    CHAT_THREAD_NOT_FOUND = "CHAT_THREAD_NOT_FOUND"
    CUSTOMER_NOT_FOUND = "CUSTOMER_NOT_FOUND"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INVALID_DATE_RANGE = "INVALID_DATE_RANGE"
    INVALID_ORDER_STATUS = "INVALID_ORDER_STATUS"

    # Rate limiting (429)
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"

    # Server errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Any | None = None,
    ) -> None:
        self.error_code = error_code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class AuthenticationError(AppException):
    """Authentication failed."""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.UNAUTHORIZED,
    ) -> None:
        super().__init__(
            error_code=error_code,
            message=message,
            status_code=401,
        )


class AuthorizationError(AppException):
    """Authorization failed."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            error_code=ErrorCode.FORBIDDEN,
            message=message,
            status_code=403,
        )


class DocumentNotFoundError(AppException):
    """A document addressed by collection and id does not exist."""

    def __init__(self, collection: str, document_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.DOCUMENT_NOT_FOUND,
            message=f"Document not found: {collection}/{document_id}",
            status_code=404,
            details={"collection": collection, "document_id": document_id},
        )


class OrderNotFoundError(AppException):
    """Order not found."""

    def __init__(self, order_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.ORDER_NOT_FOUND,
            message=f"Order not found: {order_id}",
            status_code=404,
            details={"order_id": order_id},
        )


class ChatThreadNotFoundError(AppException):
    """Chat thread not found."""

    def __init__(self, thread_id: str) -> None:
        super().__init__(
            error_code=ErrorCode.CHAT_THREAD_NOT_FOUND,
            message=f"Chat thread not found: {thread_id}",
            status_code=404,
            details={"thread_id": thread_id},
        )


class CustomerNotFoundError(AppException):
    """No order has been seen for the customer email."""

    def __init__(self, email: str) -> None:
        super().__init__(
            error_code=ErrorCode.CUSTOMER_NOT_FOUND,
            message=f"Customer not found: {email}",
            status_code=404,
            details={"email": email},
        )


class InvalidDateRangeError(AppException):
    """Date range start is after its end."""

    def __init__(self, start: str, end: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_DATE_RANGE,
            message="Start of the date range must not be after its end",
            status_code=400,
            details={"start": start, "end": end},
        )


class InvalidOrderStatusError(AppException):
    """Order status is not one of the known statuses."""

    def __init__(self, status: str) -> None:
        super().__init__(
            error_code=ErrorCode.INVALID_ORDER_STATUS,
            message=f"Invalid order status: {status}",
            status_code=400,
            details={"status": status},
        )
