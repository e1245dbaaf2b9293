"""Canonical request construction.

The canonical request is the newline-joined string that gets hashed into the
string to sign::

    METHOD
    /canonical/path/
    name=value&name=value
    header:value\\n...
    header;header
    content-hash
"""
import re
from typing import Dict, List, Mapping, Sequence
from urllib.parse import unquote, urlsplit

from .encoding import url_encode
from .exceptions import ValidationError
from .request import Request

# Characters a URI may not contain literally, and malformed percent-escapes.
_INVALID_URI = re.compile(r'[\x00-\x20"<>\\^`{|}\x7f]|%(?![0-9A-Fa-f]{2})')


def canonical_path(path: str) -> str:
    """Build the canonical path.

    Any query or fragment is dropped and the path is decoded, re-encoded with
    ``/`` preserved, and wrapped in leading and trailing slashes.

    A path that is not a valid URI reference (raw whitespace, characters such
    as ``<`` or ``{``, or a ``%`` not followed by two hex digits) is
    unparseable.

    :param path: request path, possibly percent-encoded.
    :return: str, the canonical path; ``/`` for an empty or unparseable path.
    """
    if not path or _INVALID_URI.search(path):
        return '/'
    try:
        path = unquote(urlsplit(path).path)
    except ValueError:
        return '/'
    if not path:
        return '/'

    value = url_encode(path, is_path=True)
    if not value.startswith('/'):
        value = '/' + value
    if not value.endswith('/'):
        value += '/'
    return value


def canonical_query_string(params: Mapping[str, Sequence[str]]) -> str:
    """Build the canonical query string from a name -> values multimap.

    Names and values are encoded, values are sorted per name and names are
    sorted; multi-valued parameters repeat the name once per value.
    """
    encoded: Dict[str, List[str]] = {}
    for name, values in params.items():
        encoded[url_encode(name)] = sorted(url_encode(v) for v in values)
    return '&'.join(
        f"{name}={value}"
        for name in sorted(encoded)
        for value in encoded[name]
    )


def canonical_headers_string(headers: Mapping[str, str], signed_headers: Sequence[str]) -> str:
    """Build ``name:value`` lines for the signed headers.

    Every line ends with a newline; a signed header missing from
    ``headers`` contributes an empty value.
    """
    lines: List[str] = []
    for name in signed_headers:
        value = headers.get(name)
        lines.append(f"{name.lower()}:{value.strip() if value else ''}\n")
    return ''.join(lines)


def signed_headers_string(signed_headers: Sequence[str]) -> str:
    return ';'.join(name.lower() for name in signed_headers)


def build_canonical_request(request: Request, signed_headers: Sequence[str], content_hash: str) -> str:
    """Build the canonical request string for ``request``.

    :param request: Request, the request to canonicalize.
    :param signed_headers: Sequence[str], header names to sign, in order.
    :param content_hash: str, hex digest of the body (or caller supplied).
    :raise ValidationError: if the method or url has not been set.
    :return: str, the canonical request.
    """
    if request.method is None or request.url is None:
        raise ValidationError("method and url are required to build a canonical request")
    return '\n'.join([
        request.method.upper(),
        canonical_path(request.path),
        canonical_query_string(request.query_params),
        canonical_headers_string(request.headers, signed_headers),
        signed_headers_string(signed_headers),
        content_hash,
    ])
