from .logging import LoggingMiddleware
from .error_handler import ErrorHandlerMiddleware

__all__ = [
    'LoggingMiddleware',
    'ErrorHandlerMiddleware'
]
