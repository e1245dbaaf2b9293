"""SDK-HMAC request signing and verification."""
import hmac
import logging
import re
from datetime import datetime, timezone
from typing import BinaryIO, Dict, List, Mapping, Optional, Union

from .algorithms import Algorithm, DigestBackend, get_backend
from .canonical import build_canonical_request, signed_headers_string
from .config import algorithm_from_env
from .exceptions import SigningError, ValidationError
from .request import Body, Request

logger = logging.getLogger(__name__)

AUTHORIZATION = 'Authorization'
HOST = 'Host'
X_SDK_DATE = 'X-Sdk-Date'
X_SDK_CONTENT_SHA256 = 'x-sdk-content-sha256'
UNSIGNED_PAYLOAD = 'UNSIGNED-PAYLOAD'
TIMESTAMP_FORMAT = '%Y%m%dT%H%M%SZ'

Headers = Dict[str, str]

_CHUNK_SIZE = 8192


class AuthorizationHeader:
    """Parsed or to-be-formatted ``Authorization`` header value."""

    __slots__ = ('algorithm', 'access_key', 'signed_headers', 'signature')

    _PATTERNS = {
        algorithm: re.compile(
            re.escape(algorithm.value)
            + r'\s+Access=([^,]+),\s?SignedHeaders=([^,]+),\s?Signature=(\w+)'
        )
        for algorithm in Algorithm
    }

    def __init__(
            self,
            algorithm: Algorithm,
            access_key: str,
            signed_headers: List[str],
            signature: str
    ) -> None:
        self.algorithm = algorithm
        self.access_key = access_key
        self.signed_headers = signed_headers
        self.signature = signature

    @classmethod
    def parse(cls, value: Optional[str], algorithm: Algorithm) -> Optional['AuthorizationHeader']:
        """Parse an Authorization value signed with ``algorithm``.

        :return: AuthorizationHeader, or None if ``value`` does not match.
        """
        if not value:
            return None
        m = cls._PATTERNS[algorithm].search(value)
        if not m:
            return None
        return cls(algorithm, m.group(1), m.group(2).split(';'), m.group(3))

    def format(self) -> str:
        return (
            f"{self.algorithm.value} "
            f"Access={self.access_key}, "
            f"SignedHeaders={signed_headers_string(self.signed_headers)}, "
            f"Signature={self.signature}"
        )

    def __str__(self) -> str:
        return self.format()


class SignResult:
    """URL and headers of a signed request, ready for an HTTP client."""

    __slots__ = ('url', 'headers')

    def __init__(self, url: str, headers: Headers) -> None:
        self.url = url
        self.headers = headers

    def __repr__(self) -> str:
        return f"SignResult(url={self.url!r}, headers={self.headers!r})"


class Signer:
    """Signs and verifies requests with SDK-HMAC-SHA256 or SDK-HMAC-SM3.

    The algorithm is fixed at construction and bound to a digest backend;
    pass ``backend`` to use a different crypto provider.
    """

    def __init__(
            self,
            algorithm: Union[str, Algorithm] = Algorithm.HMAC_SHA256,
            backend: Optional[DigestBackend] = None
    ) -> None:
        self.algorithm = Algorithm.from_label(algorithm)
        self.backend = backend if backend is not None else get_backend(self.algorithm)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'Signer':
        """Build a signer using the algorithm configured in the environment."""
        return cls(algorithm_from_env(environ))

    # -- primitives --------------------------------------------------------

    def _hash(self, data: bytes) -> bytes:
        try:
            return self.backend.digest(data)
        except Exception as e:
            raise SigningError(f"{self.algorithm.value} digest failed: {e}") from e

    def _hmac(self, key: bytes, data: bytes) -> bytes:
        try:
            return self.backend.hmac(key, data)
        except Exception as e:
            raise SigningError(f"{self.algorithm.value} HMAC failed: {e}") from e

    @staticmethod
    def derive_signing_key(secret: str) -> bytes:
        return secret.encode('utf-8')

    def hash_hex(self, data: Optional[Body]) -> str:
        """Hex digest of ``data`` with this signer's hash function."""
        if data is None:
            data = b''
        elif isinstance(data, str):
            data = data.encode('utf-8')
        return self._hash(data).hex()

    def hash_stream(self, stream: BinaryIO, chunk_size: int = _CHUNK_SIZE) -> str:
        """Hex digest of a binary file object, read in chunks.

        Set the result as the ``x-sdk-content-sha256`` header to sign a large
        body without holding it in memory.
        """
        chunks = iter(lambda: stream.read(chunk_size), b'')
        try:
            digest = self.backend.hash_stream(chunks)
        except OSError:
            raise
        except Exception as e:
            raise SigningError(f"{self.algorithm.value} digest failed: {e}") from e
        return digest.hex()

    def content_hash(self, request: Request) -> str:
        """Body digest, or the caller supplied ``x-sdk-content-sha256``."""
        supplied = request.get_header(X_SDK_CONTENT_SHA256)
        if supplied is not None:
            return supplied
        return self.hash_hex(request.body)

    @staticmethod
    def signed_header_names(request: Request) -> List[str]:
        """Lower-cased names of every header but Authorization, sorted."""
        names = sorted(
            (name for name in request.headers if name.lower() != AUTHORIZATION.lower()),
            key=str.lower,
        )
        return [name.lower() for name in names]

    def string_to_sign(self, canonical_request: str, timestamp: str) -> str:
        return '\n'.join([
            self.algorithm.value,
            timestamp,
            self.hash_hex(canonical_request),
        ])

    def compute_signature(self, string_to_sign: str, key: bytes) -> str:
        """Hex HMAC of ``string_to_sign``.

        :raise SigningError: if the backend fails or returns nothing.
        """
        signature = self._hmac(key, string_to_sign.encode('utf-8'))
        if not signature:
            raise SigningError(f"{self.algorithm.value} HMAC returned an empty signature")
        return signature.hex()

    def _authorization(self, request: Request, signed_headers: List[str], timestamp: str) -> str:
        credentials = request.credentials
        canonical_request = build_canonical_request(
            request, signed_headers, self.content_hash(request)
        )
        logger.debug("Canonical request:\n%s", canonical_request)
        signature = self.compute_signature(
            self.string_to_sign(canonical_request, timestamp),
            self.derive_signing_key(credentials.secret_key),
        )
        return AuthorizationHeader(
            self.algorithm, credentials.access_key, signed_headers, signature
        ).format()

    # -- public API --------------------------------------------------------

    def sign(self, request: Request) -> str:
        """Sign ``request`` in place.

        Adds ``X-Sdk-Date`` (current UTC time) and ``Host`` when missing, then
        writes the ``Authorization`` header. An existing ``X-Sdk-Date`` is
        reused, so signing twice over the same state gives the same result.

        :param request: Request, the request to sign.
        :raise ValidationError: if the request is missing its method, url or
            credentials. Nothing is written to the request in that case.
        :raise SigningError: if the digest backend fails.
        :return: str, the Authorization header value.
        """
        request.validate()
        timestamp = request.get_header(X_SDK_DATE)
        if timestamp is None:
            timestamp = datetime.now(timezone.utc).strftime(TIMESTAMP_FORMAT)
            request.add_header(X_SDK_DATE, timestamp)
        if HOST not in request.headers:
            request.add_header(HOST, request.host)

        signed_headers = self.signed_header_names(request)
        authorization = self._authorization(request, signed_headers, timestamp)
        request.add_header(AUTHORIZATION, authorization)
        logger.debug(
            "Signed %s %s with %s, signed headers %s",
            request.method, request.path, self.algorithm.value, ';'.join(signed_headers),
        )
        return authorization

    def verify(self, request: Request) -> bool:
        """Check the ``Authorization`` header of ``request``.

        The signature is rebuilt from the signed headers listed in the
        Authorization value and the existing ``X-Sdk-Date``.

        :raise ValidationError: if ``X-Sdk-Date``, the method, url or credentials
            are missing.
        :return: bool, False for a malformed or non-matching Authorization.
        """
        request.validate()
        stored = request.get_header(AUTHORIZATION)
        parsed = AuthorizationHeader.parse(stored, self.algorithm)
        if parsed is None:
            logger.debug("Authorization header missing or not %s", self.algorithm.value)
            return False

        timestamp = request.get_header(X_SDK_DATE)
        if timestamp is None:
            raise ValidationError(f"{X_SDK_DATE} header is required to verify a request")

        expected = self._authorization(request, parsed.signed_headers, timestamp)
        if not hmac.compare_digest(expected.encode('utf-8'), stored.encode('utf-8')):
            logger.debug("Signature mismatch for %s %s", request.method, request.path)
            return False
        return True


def sign_request(
        method: str,
        url: str,
        key: str,
        secret: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Optional[Body] = None,
        algorithm: Union[str, Algorithm] = Algorithm.HMAC_SHA256
) -> SignResult:
    """Sign a request in one call.

    :param method: str, HTTP method.
    :param url: str, full URL including the query string.
    :param key: str, access key.
    :param secret: str, secret key.
    :param headers: Mapping[str, str], extra headers to sign.
    :param body: request body.
    :param algorithm: signing algorithm label.
    :raise ValidationError: if a required field is empty or invalid.
    :return: SignResult, URL and headers to send.
    """
    request = Request(method=method, url=url, headers=headers, body=body, key=key, secret=secret)
    Signer(algorithm).sign(request)
    return SignResult(request.get_url(), dict(request.headers.items()))
