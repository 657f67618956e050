from fastapi import HTTPException, status


class BaseError(HTTPException):
    """Base error class for all custom exceptions."""
    def __init__(self, detail: str, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class ValidationError(BaseError):
    """Raised when input validation fails."""
    def __init__(self, detail: str):
        super().__init__(detail=detail, status_code=status.HTTP_400_BAD_REQUEST)


class NotFoundError(BaseError):
    """Raised when a requested resource is not found."""
    def __init__(self, detail: str = "Resource not found"):
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class StoreUnavailableError(BaseError):
    """Raised when the activity store cannot be read or written."""
    def __init__(self, detail: str = "Activity store unavailable"):
        super().__init__(detail=detail, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


class QueryFailureError(BaseError):
    """Raised when one of the daily reads behind a range query fails."""
    def __init__(self, detail: str = "Activity query failed"):
        super().__init__(detail=detail, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


class ConfigurationError(BaseError):
    """Raised when there is a configuration error."""
    def __init__(self, detail: str = "Configuration error"):
        super().__init__(detail=detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
