"""Request model consumed by the signer."""
from collections.abc import MutableMapping
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union
from urllib.parse import quote_plus, unquote_plus

from .encoding import url_encode
from .exceptions import UnsupportedMethodError, ValidationError

Body = Union[str, bytes]

HTTP_METHODS = frozenset(
    {'GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'HEAD', 'OPTIONS'}
)


def _require(value: Optional[str], name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} can not be empty")
    return value


class HeaderMap(MutableMapping):
    """Ordered header mapping with case-insensitive names.

    The name used for the most recent write is kept for iteration, so
    ``Host`` and ``host`` can never coexist.
    """

    def __init__(self, headers: Optional[Mapping[str, str]] = None) -> None:
        self._store: Dict[str, Tuple[str, str]] = {}
        if headers:
            self.update(headers)

    def __setitem__(self, name: str, value: str) -> None:
        self._store[name.lower()] = (name, value)

    def __getitem__(self, name: str) -> str:
        return self._store[name.lower()][1]

    def __delitem__(self, name: str) -> None:
        del self._store[name.lower()]

    def __iter__(self) -> Iterator[str]:
        return (name for name, _ in self._store.values())

    def __len__(self) -> int:
        return len(self._store)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._store

    def copy(self) -> 'HeaderMap':
        return HeaderMap(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({dict(self.items())!r})"


class Credentials:
    """Access key / secret key pair, validated on assignment."""

    __slots__ = ('_access_key', '_secret_key')

    def __init__(self, access_key: str, secret_key: str) -> None:
        self.access_key = access_key
        self.secret_key = secret_key

    @property
    def access_key(self) -> str:
        return self._access_key

    @access_key.setter
    def access_key(self, value: str) -> None:
        self._access_key = _require(value, 'access key')

    @property
    def secret_key(self) -> str:
        return self._secret_key

    @secret_key.setter
    def secret_key(self, value: str) -> None:
        self._secret_key = _require(value, 'secret key')

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Credentials):
            return NotImplemented
        return (self.access_key, self.secret_key) == (other.access_key, other.secret_key)

    def __repr__(self) -> str:
        return f"Credentials(access_key={self.access_key!r}, secret_key='***')"


class Request:
    """An API request to be signed.

    Fields are set through validating setters which normalize as they go:
    the URL is split into path, query parameters and fragment as soon as it
    is assigned. ``Signer.sign`` and ``Signer.verify`` mutate :attr:`headers`
    in place.

    Example::

        request = Request(method='get', url='https://example.com/v1/res?a=1')
        request.set_key(access_key)
        request.set_secret(secret_key)
        request.add_header('Content-Type', 'application/json')
    """

    def __init__(
            self,
            method: Optional[str] = None,
            url: Optional[str] = None,
            headers: Optional[Mapping[str, str]] = None,
            body: Optional[Body] = None,
            key: Optional[str] = None,
            secret: Optional[str] = None
    ) -> None:
        self._method: Optional[str] = None
        self._url: Optional[str] = None
        self._fragment: Optional[str] = None
        self._key: Optional[str] = None
        self._secret: Optional[str] = None
        self.headers = HeaderMap()
        self.query_params: Dict[str, List[str]] = {}
        self.body: Optional[Body] = None

        if method is not None:
            self.set_method(method)
        if url is not None:
            self.set_url(url)
        if key is not None:
            self.set_key(key)
        if secret is not None:
            self.set_secret(secret)
        for name, value in (headers or {}).items():
            self.add_header(name, value)
        if body is not None:
            self.set_body(body)

    # -- credentials -------------------------------------------------------

    @property
    def key(self) -> Optional[str]:
        return self._key

    def set_key(self, key: str) -> None:
        self._key = _require(key, 'access key')

    @property
    def secret(self) -> Optional[str]:
        return self._secret

    def set_secret(self, secret: str) -> None:
        self._secret = _require(secret, 'secret key')

    @property
    def credentials(self) -> Credentials:
        """Credentials of the request.

        :raise ValidationError: if key or secret has not been set.
        """
        return Credentials(self._key, self._secret)

    def set_credentials(self, credentials: Credentials) -> None:
        self.set_key(credentials.access_key)
        self.set_secret(credentials.secret_key)

    # -- method ------------------------------------------------------------

    @property
    def method(self) -> Optional[str]:
        return self._method

    def set_method(self, method: str) -> None:
        """Set the HTTP method, case-insensitively.

        :raise ValidationError: if ``method`` is empty.
        :raise UnsupportedMethodError: if ``method`` is not signable.
        """
        _require(method, 'method')
        normalized = method.strip().upper()
        if normalized not in HTTP_METHODS:
            raise UnsupportedMethodError(f"unsupported method: {method}")
        self._method = normalized

    # -- url ---------------------------------------------------------------

    def set_url(self, url: str) -> None:
        """Set the request URL.

        The fragment is removed and kept, and every ``name=value`` pair of
        the query string is decoded and appended to :attr:`query_params`.

        :raise ValidationError: if ``url`` is empty.
        """
        _require(url, 'url')
        url, sep, fragment = url.partition('#')
        if sep and fragment:
            self._fragment = fragment
        url, sep, query = url.partition('?')
        if sep:
            for item in query.split('&'):
                name, _, value = item.partition('=')
                if name.strip():
                    self.add_query_param(unquote_plus(name), unquote_plus(value))
        self._url = url

    @property
    def url(self) -> Optional[str]:
        """URL without query string and fragment, or None if never set."""
        return self._url

    def validate(self) -> None:
        """Check that the request carries everything signing needs.

        :raise ValidationError: if the method, url, key or secret is missing.
        """
        if self._method is None:
            raise ValidationError("method can not be empty")
        if self._url is None:
            raise ValidationError("url can not be empty")
        _require(self._key, 'access key')
        _require(self._secret, 'secret key')

    def get_url(self) -> str:
        """Rebuild the URL with the query in insertion order."""
        url = self._url or ''
        pairs = [
            f"{url_encode(name)}={url_encode(value)}"
            for name, values in self.query_params.items()
            for value in values
        ]
        if pairs:
            url += '?' + '&'.join(pairs)
        if self._fragment is not None:
            url += '#' + self._fragment
        return url

    @property
    def path(self) -> str:
        url = self._url or ''
        _, sep, rest = url.partition('://')
        if sep:
            url = rest
        i = url.find('/')
        return url[i:] if i >= 0 else '/'

    @property
    def host(self) -> str:
        url = self._url or ''
        _, sep, rest = url.partition('://')
        if sep:
            url = rest
        return url.split('/', 1)[0]

    @property
    def fragment(self) -> Optional[str]:
        return self._fragment

    def set_fragment(self, fragment: str) -> None:
        self._fragment = quote_plus(_require(fragment, 'fragment'))

    def add_query_param(self, name: str, value: str) -> None:
        self.query_params.setdefault(name, []).append(value)

    # -- headers and body --------------------------------------------------

    def add_header(self, name: Optional[str], value: str) -> None:
        if name is None or not name.strip():
            return
        self.headers[name] = value

    def get_header(self, name: str) -> Optional[str]:
        return self.headers.get(name)

    def remove_header(self, name: str) -> None:
        self.headers.pop(name, None)

    def set_body(self, body: Optional[Body]) -> None:
        self.body = body

    def __repr__(self) -> str:
        return f"Request(method={self._method!r}, url={self.get_url()!r})"
