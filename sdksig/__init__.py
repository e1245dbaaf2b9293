"""
SDK-HMAC Request Signing - Standalone Implementation

This package signs and verifies API requests with the SDK-HMAC-SHA256 and
SDK-HMAC-SM3 algorithms without depending on any HTTP client.
"""
import logging

from .algorithms import Algorithm, DigestBackend, get_backend
from .exceptions import (
    EncodingError,
    SignerError,
    SigningError,
    UnsupportedAlgorithmError,
    UnsupportedMethodError,
    ValidationError,
)
from .request import Credentials, HeaderMap, Request
from .signer import (
    UNSIGNED_PAYLOAD,
    AuthorizationHeader,
    Headers,
    SignResult,
    Signer,
    sign_request,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Algorithm",
    "AuthorizationHeader",
    "Credentials",
    "DigestBackend",
    "EncodingError",
    "HeaderMap",
    "Headers",
    "Request",
    "SignResult",
    "Signer",
    "SignerError",
    "SigningError",
    "UNSIGNED_PAYLOAD",
    "UnsupportedAlgorithmError",
    "UnsupportedMethodError",
    "ValidationError",
    "get_backend",
    "sign_request",
]
