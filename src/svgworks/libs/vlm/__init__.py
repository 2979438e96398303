"""Chat completion clients shared by svgworks apps."""

from .backends import (  # noqa: F401
    BACKEND_REGISTRY,
    BaseBackendClient,
    VLMBackend,
    VLMBackendError,
    create_backend_client,
)

__all__ = [
    "BACKEND_REGISTRY",
    "BaseBackendClient",
    "VLMBackend",
    "VLMBackendError",
    "create_backend_client",
]
