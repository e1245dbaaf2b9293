"""Percent-encoding used by the SDK-HMAC canonical request."""
import re
from typing import Optional, Union
from urllib.parse import quote_plus

from .exceptions import EncodingError

# Rewrites applied on top of form encoding (RFC 3986 unreserved set).
_REWRITES = {
    '+': '%20',
    '*': '%2A',
    '%7E': '~',
}
_REWRITE_RE = re.compile(r'\+|\*|%7E|%2F')


def url_encode(raw: Optional[Union[str, bytes]], is_path: bool = False) -> str:
    """Percent-encode ``raw`` the way the signing protocol expects.

    Spaces become ``%20``, ``*`` becomes ``%2A`` and ``~`` is left alone.
    When ``is_path`` is true, ``/`` is kept as a path separator.

    :param raw: value to encode, ``None`` encodes to an empty string.
    :param is_path: whether ``raw`` is a URL path.
    :raise EncodingError: if ``raw`` cannot be encoded as UTF-8.
    :return: str, the encoded value.
    """
    if raw is None:
        return ''
    try:
        if isinstance(raw, str):
            raw = raw.encode('utf-8')
        encoded = quote_plus(raw, safe='')
    except (UnicodeError, TypeError) as e:
        raise EncodingError(f"Failed to encode {raw!r}: {e}") from e

    def _replace(match) -> str:
        token = match.group(0)
        if token == '%2F':
            return '/' if is_path else token
        return _REWRITES[token]

    return _REWRITE_RE.sub(_replace, encoded)
