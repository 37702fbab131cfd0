"""Native Python client for the Pogoplug cloud API."""

from .auth import (
    AuthError,
    ConfigError,
    FileSessionStore,
    MemorySessionStore,
    SessionStore,
    load_config,
)
from .client import PogoplugClient
from .errors import (
    ApiError,
    DecodeError,
    ErrorCode,
    PogoplugError,
    TokenExpiredError,
    TransportError,
    error_message,
)
from .models import (
    ApiException,
    ClientConfig,
    Device,
    FileType,
    PogoFile,
    ResponseFormat,
    Service,
    User,
)

__all__ = [
    # Auth
    "AuthError",
    "ConfigError",
    "FileSessionStore",
    "MemorySessionStore",
    "SessionStore",
    "load_config",
    # Client
    "PogoplugClient",
    # Errors
    "ApiError",
    "DecodeError",
    "ErrorCode",
    "PogoplugError",
    "TokenExpiredError",
    "TransportError",
    "error_message",
    # Models
    "ApiException",
    "ClientConfig",
    "Device",
    "FileType",
    "PogoFile",
    "ResponseFormat",
    "Service",
    "User",
]
