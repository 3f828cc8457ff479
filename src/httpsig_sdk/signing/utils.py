"""
Utility functions for request signing

This module provides timestamp handling, request path and query string
construction, and small helpers shared by the signing modules.
"""

import json
import time
from email.utils import formatdate
from typing import Any, Dict, Mapping, Optional, Sequence
from urllib.parse import quote, urlsplit

from ..exceptions import ConfigurationError


def generate_timestamp() -> int:
    """
    Generate current Unix timestamp.

    Returns:
        int: Current Unix timestamp (seconds since epoch)
    """
    return int(time.time())


def format_http_date(timestamp: Optional[int] = None) -> str:
    """
    Format timestamp as an RFC 1123 HTTP date.

    Args:
        timestamp: Unix timestamp (uses current time if None)

    Returns:
        str: e.g. ``Thu, 07 Jan 2021 06:13:20 GMT``
    """
    if timestamp is None:
        timestamp = generate_timestamp()
    return formatdate(timestamp, usegmt=True)


def normalize_header_name(name: str) -> str:
    """
    Normalize header name to lowercase for consistent processing.

    Args:
        name: Header name to normalize

    Returns:
        str: Lowercase header name
    """
    return name.lower().strip()


def percent_encode(value: Any) -> str:
    """Percent-encode a query component, spaces as ``%20``."""
    return quote(str(value), safe="")


def build_request_path(path_template: str, path_parameters: Mapping[str, Any]) -> str:
    """
    Substitute ``{name}`` placeholders in a path template.

    Values are inserted as given; callers pass already-encoded path segments.
    """
    path = path_template or ""
    for name, value in path_parameters.items():
        path = path.replace("{" + name + "}", str(value))
    return path


def build_query_string(query_parameters: Mapping[str, Sequence[Any]]) -> str:
    """
    Serialize query parameters.

    Multi-valued parameters are written as repeated ``key[]=value`` pairs,
    single values as ``key=value``. Keys and values are percent-encoded with
    spaces rendered as ``%20``.

    Returns:
        str: Query string without the leading ``?`` (empty if no parameters)
    """
    pairs = []
    for key, values in query_parameters.items():
        if isinstance(values, (str, bytes)) or not isinstance(values, Sequence):
            values = [values]
        if len(values) > 1:
            for value in values:
                pairs.append(f"{percent_encode(key)}[]={percent_encode(value)}")
        elif values:
            pairs.append(f"{percent_encode(key)}={percent_encode(values[0])}")
    return "&".join(pairs)


def parse_base_path(base_path: str) -> Dict[str, str]:
    """
    Split a base path into host and path prefix.

    Raises:
        ConfigurationError: If the base path has no scheme or host
    """
    parsed = urlsplit(base_path)
    if not parsed.scheme or not parsed.hostname:
        raise ConfigurationError(
            f"Invalid base path: {base_path}",
            "INVALID_BASE_PATH",
            {"base_path": base_path}
        )
    return {
        "scheme": parsed.scheme,
        "host": parsed.hostname,
        "path": parsed.path.rstrip("/"),
    }


def build_target_uri(base_path: str, path: str, query: str) -> str:
    """Path plus ``?query`` as used by ``(request-target)``."""
    prefix = parse_base_path(base_path)["path"]
    full_path = prefix + path
    if not full_path.startswith("/"):
        full_path = "/" + full_path
    return f"{full_path}?{query}" if query else full_path


def serialize_body(body: Any) -> bytes:
    """
    Serialize a request body to the bytes that are sent and digested.

    ``None`` becomes the empty byte string, text is UTF-8 encoded, bytes pass
    through and anything else is written as compact JSON.
    """
    if body is None:
        return b""
    if isinstance(body, (bytes, bytearray)):
        return bytes(body)
    if isinstance(body, str):
        return body.encode('utf-8')
    try:
        return json.dumps(body, separators=(',', ':'), ensure_ascii=False).encode('utf-8')
    except (TypeError, ValueError) as e:
        raise ConfigurationError(
            f"Request body is not JSON serializable: {e}",
            "INVALID_BODY",
            {"body_type": type(body).__name__}
        ) from e


class PerformanceTimer:
    """Simple performance timer for monitoring signing operations."""

    def __init__(self):
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
