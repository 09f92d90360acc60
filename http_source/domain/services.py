"""
Domain Services

Pure request-translation logic: Content-Type classification,
header allow-listing and CORS policy.
"""

import codecs
import fnmatch
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from http_source.domain.errors import BadRequestError, ForbiddenError
from http_source.domain.value_objects import (
    CONTENT_TYPE_HEADER,
    ContentClassification,
    PayloadKind,
)


DEFAULT_CHARSET = "UTF-8"
DEFAULT_MEDIA_TYPE = "text/plain"
TEXT_MEDIA_TYPES = ("application/json",)

# Token expanding to the standard HTTP request header names
HTTP_REQUEST_HEADERS = "HTTP_REQUEST_HEADERS"

STANDARD_REQUEST_HEADER_NAMES = frozenset(
    name.lower()
    for name in (
        "Accept",
        "Accept-Charset",
        "Accept-Encoding",
        "Accept-Language",
        "Accept-Ranges",
        "Authorization",
        "Cache-Control",
        "Connection",
        "Content-Length",
        "Content-Type",
        "Cookie",
        "Date",
        "Expect",
        "From",
        "Host",
        "If-Match",
        "If-Modified-Since",
        "If-None-Match",
        "If-Range",
        "If-Unmodified-Since",
        "Max-Forwards",
        "Pragma",
        "Proxy-Authorization",
        "Range",
        "Referer",
        "TE",
        "Upgrade",
        "User-Agent",
        "Via",
        "Warning",
    )
)

INVALID_CORS_REQUEST = "Invalid CORS request"
ALL = "*"


def parse_content_type(value: str) -> Tuple[str, Dict[str, str]]:
    """
    Split a Content-Type value into media type and parameters.

    Args:
        value: Raw header value, e.g. ``Application/JSON; charset="utf-8"``

    Returns:
        Tuple of lower-cased ``type/subtype`` and a dict of parameters
        keyed by lower-cased name
    """
    parts = value.split(";")
    media_type = parts[0].strip().lower()
    params: Dict[str, str] = {}
    for part in parts[1:]:
        name, sep, param_value = part.partition("=")
        if not sep:
            continue
        params[name.strip().lower()] = param_value.strip().strip('"')
    return media_type, params


def is_text_media_type(media_type: str) -> bool:
    return media_type.startswith("text/") or media_type in TEXT_MEDIA_TYPES


def classify_content_type(value: Optional[str]) -> ContentClassification:
    """
    Decide the payload representation from the Content-Type header alone.

    ``text/*`` and ``application/json`` become TEXT decoded with the declared
    charset (UTF-8 by default). A missing Content-Type is treated as
    ``text/plain``. Everything else is BINARY.

    Raises:
        BadRequestError: If a TEXT content type declares an unknown charset
    """
    if not value or not value.strip():
        return ContentClassification(
            kind=PayloadKind.TEXT,
            media_type=DEFAULT_MEDIA_TYPE,
            charset=DEFAULT_CHARSET,
            canonical=f"{DEFAULT_MEDIA_TYPE};charset={DEFAULT_CHARSET}",
        )

    media_type, params = parse_content_type(value)

    # Binary keeps its parameters as sent
    if not is_text_media_type(media_type):
        canonical = media_type + "".join(f";{k}={v}" for k, v in params.items())
        return ContentClassification(
            kind=PayloadKind.BINARY,
            media_type=media_type,
            charset=None,
            canonical=canonical,
        )

    charset = params.get("charset") or DEFAULT_CHARSET
    try:
        codec = codecs.lookup(charset)
    except LookupError:
        raise BadRequestError(
            f"Unsupported charset: {charset}",
            details={"content_type": value},
        )
    # Bytes-to-bytes codecs such as hex or base64 never decode to str
    if not getattr(codec, "_is_text_encoding", True):
        raise BadRequestError(
            f"Unsupported charset: {charset}",
            details={"content_type": value},
        )

    charset = charset.upper()
    return ContentClassification(
        kind=PayloadKind.TEXT,
        media_type=media_type,
        charset=charset,
        canonical=f"{media_type};charset={charset}",
    )


def decode_payload(body: bytes, classification: ContentClassification) -> Union[str, bytes]:
    """
    Build the payload for a classified body.

    Raises:
        BadRequestError: If a TEXT body is not valid in its charset
    """
    if classification.kind is PayloadKind.BINARY:
        return body
    try:
        return body.decode(classification.charset or DEFAULT_CHARSET)
    except (UnicodeDecodeError, LookupError) as e:
        raise BadRequestError(
            f"Request body is not valid {classification.charset}",
            details={"reason": str(e)},
        )


class HeaderMapper:
    """
    Selects which inbound headers are copied onto the outbound message.

    Patterns are evaluated in order and the first match wins. Supported forms:
    glob patterns (``*``, ``x-*``), the ``HTTP_REQUEST_HEADERS`` token for
    the standard request header set, and ``!pattern`` to exclude.
    Matching is case-insensitive. Content-Type is never copied.
    """

    def __init__(self, patterns: Iterable[str]):
        self._patterns: List[str] = [p.strip() for p in patterns if p and p.strip()]

    @property
    def patterns(self) -> List[str]:
        return list(self._patterns)

    def matches(self, name: str) -> bool:
        lowered = name.lower()
        for pattern in self._patterns:
            # A matching negated pattern excludes the header
            negated = pattern.startswith("!")
            if negated:
                pattern = pattern[1:]
            if self._match(lowered, pattern):
                return not negated
        return False

    @staticmethod
    def _match(lowered: str, pattern: str) -> bool:
        if pattern == HTTP_REQUEST_HEADERS:
            return lowered in STANDARD_REQUEST_HEADER_NAMES
        return fnmatch.fnmatchcase(lowered, pattern.lower())

    def map_headers(self, headers: Mapping[str, str]) -> Dict[str, str]:
        """
        Filter inbound headers through the allow-list.

        Returns:
            Dict of forwarded headers with lower-cased names
        """
        mapped: Dict[str, str] = {}
        for name, value in headers.items():
            lowered = name.lower()
            if lowered == CONTENT_TYPE_HEADER:
                continue
            if self.matches(lowered):
                mapped[lowered] = value
        return mapped


def _split_header_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class CorsPolicy:
    """
    Cross-origin policy for the ingress endpoint.

    A request carrying an Origin header that matches none of the allowed
    origin patterns is rejected with ``ForbiddenError``.
    """

    def __init__(
        self,
        allowed_origins: Sequence[str] = (ALL,),
        allowed_headers: Sequence[str] = (ALL,),
        allowed_methods: Sequence[str] = ("GET", "HEAD", "POST"),
        allow_credentials: Optional[bool] = None,
        max_age: int = 1800,
    ):
        if not allowed_origins:
            raise ValueError("allowed_origins must not be empty")
        if not allowed_headers:
            raise ValueError("allowed_headers must not be empty")
        self.allowed_origins = [o.strip() for o in allowed_origins]
        self.allowed_headers = [h.strip() for h in allowed_headers]
        self.allowed_methods = [m.strip().upper() for m in allowed_methods]
        self.allow_credentials = allow_credentials
        self.max_age = max_age

    def check_origin(self, origin: str) -> str:
        """
        Validate an Origin header.

        Returns:
            Value for ``Access-Control-Allow-Origin``

        Raises:
            ForbiddenError: If the origin is not allowed
        """
        lowered = origin.lower()
        if not any(fnmatch.fnmatchcase(lowered, p.lower()) for p in self.allowed_origins):
            raise ForbiddenError(INVALID_CORS_REQUEST, details={"origin": origin})
        # Credentials forbid a literal "*" in the response
        if ALL in self.allowed_origins and not self.allow_credentials:
            return ALL
        return origin

    def check_method(self, method: str) -> None:
        if method.upper() not in self.allowed_methods and ALL not in self.allowed_methods:
            raise ForbiddenError(INVALID_CORS_REQUEST, details={"method": method})

    def check_headers(self, requested: List[str]) -> List[str]:
        """Return the requested headers if all are allowed."""
        for name in requested:
            lowered = name.lower()
            if not any(fnmatch.fnmatchcase(lowered, p.lower()) for p in self.allowed_headers):
                raise ForbiddenError(INVALID_CORS_REQUEST, details={"header": name})
        return requested

    def _common_headers(self, allow_origin: str) -> Dict[str, str]:
        headers = {"Access-Control-Allow-Origin": allow_origin}
        if allow_origin != ALL:
            headers["Vary"] = "Origin"
        if self.allow_credentials:
            headers["Access-Control-Allow-Credentials"] = "true"
        return headers

    def preflight_headers(
        self,
        origin: str,
        request_method: str,
        request_headers: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Response headers for a pre-flight request.

        Raises:
            ForbiddenError: If origin, method or any requested header is rejected
        """
        allow_origin = self.check_origin(origin)
        self.check_method(request_method)
        requested = self.check_headers(_split_header_list(request_headers))

        headers = self._common_headers(allow_origin)
        headers["Access-Control-Allow-Methods"] = ", ".join(self.allowed_methods)
        if requested:
            headers["Access-Control-Allow-Headers"] = ", ".join(requested)
        headers["Access-Control-Max-Age"] = str(self.max_age)
        return headers

    def actual_headers(self, origin: str, method: str) -> Dict[str, str]:
        """
        Response headers for an actual cross-origin request.

        Raises:
            ForbiddenError: If the origin or the request method is rejected
        """
        allow_origin = self.check_origin(origin)
        self.check_method(method)
        return self._common_headers(allow_origin)
