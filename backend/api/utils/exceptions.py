"""Custom exception classes for the calendar API"""
from fastapi import HTTPException, status


class StockCalException(HTTPException):
    """Base exception with error_code support"""

    def __init__(self, error_code: str, message: str, status_code: int, details=None):
        super().__init__(status_code=status_code, detail=message)
        self.error_code = error_code
        self.details = details


class ResourceNotFoundException(StockCalException):
    """Exception for when a resource is not found"""

    def __init__(self, resource: str, identifier: str = None):
        message = f"{resource} not found"
        if identifier:
            message += f": {identifier}"
        super().__init__(
            error_code="NOT_FOUND",
            message=message,
            status_code=status.HTTP_404_NOT_FOUND
        )


class InvalidInputException(StockCalException):
    """Exception for invalid input data"""

    def __init__(self, message: str, details=None):
        super().__init__(
            error_code="INVALID_INPUT",
            message=message,
            status_code=status.HTTP_400_BAD_REQUEST,
            details=details
        )


class UnauthorizedException(StockCalException):
    """Exception for requests without the identity cookie"""

    def __init__(self, message: str = "User ID not found"):
        super().__init__(
            error_code="UNAUTHORIZED",
            message=message,
            status_code=status.HTTP_401_UNAUTHORIZED
        )
