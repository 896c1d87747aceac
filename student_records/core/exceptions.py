from typing import Any, Dict, Optional
from fastapi import status


class BaseAPIException(Exception):
    """
    Base class for every error the service raises on purpose.
    Keeps the error envelope returned to the frontend uniform.
    """
    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ConflictException(BaseAPIException):
    """400: the write would break a uniqueness constraint (duplicate email)"""
    def __init__(self, message: str = "Resource already exists", details: dict = None):
        super().__init__(
            message=message,
            code="CONFLICT",
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class NotFoundException(BaseAPIException):
    """404: resource not found"""
    def __init__(self, message: str = "Resource not found"):
        super().__init__(
            message=message,
            code="NOT_FOUND",
            status_code=status.HTTP_404_NOT_FOUND
        )


class ServiceUnavailableException(BaseAPIException):
    """
    503: the database is not connected. Requests fail immediately
    instead of waiting for the reconnect loop.
    """
    def __init__(self, message: str = "Database is not available"):
        super().__init__(
            message=message,
            code="SERVICE_UNAVAILABLE",
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE
        )
