"""
Canonical signing string construction

This module resolves every configured signing header to its value and
produces the newline-joined ``name: value`` string that is hashed and signed,
along with the literal headers (Date, Host, Digest) that must accompany it.
"""

from collections import OrderedDict
from typing import List, Optional

from ..exceptions import HeaderNotFoundError
from .digest import calculate_digest
from .types import (
    CanonicalSignatureInput,
    ContentDigest,
    RequestDescriptor,
    SigningConfiguration,
    HEADER_CREATED,
    HEADER_DATE,
    HEADER_DIGEST,
    HEADER_EXPIRES,
    HEADER_HOST,
    HEADER_REQUEST_TARGET,
    PSEUDO_HEADERS,
)
from .utils import (
    build_query_string,
    build_request_path,
    build_target_uri,
    format_http_date,
    normalize_header_name,
    parse_base_path,
)

# Names resolved by the signer rather than looked up in the request headers
_SPECIAL_HEADERS = {
    normalize_header_name(name)
    for name in PSEUDO_HEADERS + (HEADER_DATE, HEADER_HOST, HEADER_DIGEST)
}


def find_missing_headers(descriptor: RequestDescriptor, signing_headers: List[str]) -> List[str]:
    """Return configured header names that the request cannot supply."""
    return [
        header for header in signing_headers
        if normalize_header_name(header) not in _SPECIAL_HEADERS
        and descriptor.get_header(header) is None
    ]


def validate_signing_headers(descriptor: RequestDescriptor, signing_headers: List[str]) -> None:
    """
    Check every non-pseudo signing header exists in the request.

    Raises:
        HeaderNotFoundError: For the first missing header
    """
    missing = find_missing_headers(descriptor, signing_headers)
    if missing:
        raise HeaderNotFoundError(missing[0], list(descriptor.header_parameters.keys()))


class CanonicalMessageBuilder:
    """
    Canonical message builder for hs2019 signatures
    """

    def __init__(
        self,
        descriptor: RequestDescriptor,
        config: SigningConfiguration,
        created: int,
        content_digest: Optional[ContentDigest] = None
    ):
        """
        Initialize canonical message builder.

        Args:
            descriptor: Request being signed
            config: Signing configuration
            created: Frozen Unix timestamp for this signature
            content_digest: Precomputed body digest; computed on demand if omitted
        """
        self.descriptor = descriptor
        self.config = config
        self.created = created
        self.content_digest = content_digest

    def build(self) -> CanonicalSignatureInput:
        """
        Resolve every signing header in configured order.

        Returns:
            CanonicalSignatureInput: Ordered components and literal headers

        Raises:
            HeaderNotFoundError: If a signed header is absent from the request
        """
        components: 'OrderedDict[str, str]' = OrderedDict()
        literal_headers = {}

        for header in self.config.signing_headers:
            name = normalize_header_name(header)

            if name == HEADER_REQUEST_TARGET:
                components[name] = self._build_request_target()
            elif name == HEADER_CREATED:
                components[name] = str(self.created)
            elif name == HEADER_EXPIRES:
                components[name] = str(self.expires)
            elif name == normalize_header_name(HEADER_DATE):
                value = format_http_date(self.created)
                components[name] = value
                literal_headers[HEADER_DATE] = value
            elif name == normalize_header_name(HEADER_HOST):
                value = self.host
                components[name] = value
                literal_headers[HEADER_HOST] = value
            elif name == normalize_header_name(HEADER_DIGEST):
                if self.content_digest is None:
                    self.content_digest = calculate_digest(self.descriptor.body, self.config.hash_algorithm)
                components[name] = self.content_digest.header_value
                literal_headers[HEADER_DIGEST] = self.content_digest.header_value
            else:
                value = self.descriptor.get_header(header)
                if value is None:
                    raise HeaderNotFoundError(header, list(self.descriptor.header_parameters.keys()))
                components[name] = value

        return CanonicalSignatureInput(components=components, literal_headers=literal_headers)

    @property
    def expires(self) -> int:
        return self.created + self.config.validity_period_seconds

    @property
    def host(self) -> str:
        return parse_base_path(self.descriptor.base_path)["host"]

    def _build_request_target(self) -> str:
        """``<lowercase method> <path>[?query]``"""
        path = build_request_path(self.descriptor.path_template, self.descriptor.path_parameters)
        query = self.descriptor.query_string
        if query is None:
            query = build_query_string(self.descriptor.query_parameters)
        target = build_target_uri(self.descriptor.base_path, path, query)
        return f"{self.descriptor.method.lower()} {target}"


def build_canonical_input(
    descriptor: RequestDescriptor,
    config: SigningConfiguration,
    created: int,
    content_digest: Optional[ContentDigest] = None
) -> CanonicalSignatureInput:
    """
    Build the canonical signing input for a request.

    Args:
        descriptor: Request being signed
        config: Signing configuration
        created: Frozen Unix timestamp
        content_digest: Body digest when Digest is signed

    Returns:
        CanonicalSignatureInput: Ordered signing components
    """
    return CanonicalMessageBuilder(descriptor, config, created, content_digest).build()


def build_signing_string(
    descriptor: RequestDescriptor,
    config: SigningConfiguration,
    created: int,
    content_digest: Optional[ContentDigest] = None
) -> str:
    """Canonical signing string for a request."""
    return build_canonical_input(descriptor, config, created, content_digest).to_signing_string()
