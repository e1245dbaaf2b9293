"""Exceptions raised while building, signing and verifying requests."""


class SignerError(Exception):
    """Base exception class for request signing errors."""


class ValidationError(SignerError, ValueError):
    """Exception raised when a request field is missing or empty."""


class UnsupportedMethodError(ValidationError):
    """Exception raised for an HTTP method outside the signable set."""


class EncodingError(SignerError):
    """Exception raised when a value cannot be percent-encoded."""


class UnsupportedAlgorithmError(SignerError, ValueError):
    """Exception raised for an unknown signing algorithm label."""


class SigningError(SignerError):
    """Exception raised when the digest or HMAC backend fails."""
