import logging

from .client import RegistrarClient
from .errors import (
    APIError,
    AuthenticationError,
    ErrorCode,
    RateLimitError,
    RegistrarError,
    TransportError,
)

logger = logging.getLogger(__name__)

__all__ = [
    "RegistrarClient",
    "APIError",
    "AuthenticationError",
    "ErrorCode",
    "RateLimitError",
    "RegistrarError",
    "TransportError",
]
