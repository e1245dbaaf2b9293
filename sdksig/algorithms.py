"""Signing algorithms and the digest backends that implement them."""
import hashlib
import hmac
from abc import ABC, abstractmethod
from enum import Enum
from typing import Iterable, Union

from .exceptions import UnsupportedAlgorithmError


class Algorithm(str, Enum):
    """Signing algorithm, valued by the label used on the wire."""
    HMAC_SHA256 = 'SDK-HMAC-SHA256'
    HMAC_SM3 = 'SDK-HMAC-SM3'

    @classmethod
    def from_label(cls, label: Union[str, 'Algorithm']) -> 'Algorithm':
        """Look up an algorithm by label.

        :raise UnsupportedAlgorithmError: if ``label`` is unknown.
        """
        try:
            return cls(label)
        except ValueError:
            raise UnsupportedAlgorithmError(f"Unsupported signing algorithm: {label}") from None


class DigestBackend(ABC):
    """Hash and HMAC primitives for one algorithm.

    Subclasses implement :meth:`digest`, :meth:`hmac` and :meth:`hash_stream`;
    a backend can be injected into ``Signer`` to swap the crypto provider.
    """
    name = ''

    @abstractmethod
    def digest(self, data: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def hmac(self, key: bytes, data: bytes) -> bytes:
        raise NotImplementedError

    @abstractmethod
    def hash_stream(self, chunks: Iterable[bytes]) -> bytes:
        raise NotImplementedError


class Sha256Backend(DigestBackend):
    """SHA-256 from the standard library."""
    name = 'sha256'

    def digest(self, data: bytes) -> bytes:
        return hashlib.sha256(data).digest()

    def hmac(self, key: bytes, data: bytes) -> bytes:
        return hmac.new(key, data, hashlib.sha256).digest()

    def hash_stream(self, chunks: Iterable[bytes]) -> bytes:
        h = hashlib.sha256()
        for chunk in chunks:
            h.update(chunk)
        return h.digest()


class Sm3Backend(DigestBackend):
    """SM3 through the ``cryptography`` package (OpenSSL)."""
    name = 'sm3'

    def digest(self, data: bytes) -> bytes:
        return self.hash_stream((data,))

    def hmac(self, key: bytes, data: bytes) -> bytes:
        from cryptography.hazmat.primitives import hashes
        from cryptography.hazmat.primitives.hmac import HMAC

        h = HMAC(key, hashes.SM3())
        h.update(data)
        return h.finalize()

    def hash_stream(self, chunks: Iterable[bytes]) -> bytes:
        from cryptography.hazmat.primitives import hashes

        h = hashes.Hash(hashes.SM3())
        for chunk in chunks:
            h.update(chunk)
        return h.finalize()


_BACKENDS = {
    Algorithm.HMAC_SHA256: Sha256Backend,
    Algorithm.HMAC_SM3: Sm3Backend,
}


def get_backend(algorithm: Union[str, Algorithm]) -> DigestBackend:
    """Return the default backend for ``algorithm``."""
    return _BACKENDS[Algorithm.from_label(algorithm)]()


def sm3_available() -> bool:
    """Whether the installed OpenSSL build provides SM3."""
    from cryptography.exceptions import UnsupportedAlgorithm

    try:
        Sm3Backend().digest(b'')
    except UnsupportedAlgorithm:
        return False
    return True


__all__ = [
    'Algorithm',
    'DigestBackend',
    'Sha256Backend',
    'Sm3Backend',
    'get_backend',
    'sm3_available',
]
