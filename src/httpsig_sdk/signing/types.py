"""
Type definitions for request signing functionality

This module provides the enums and data classes shared by the canonicalizer,
the signature engine and the Authorization header builder.
"""

from collections import OrderedDict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union

from ..crypto.secret import Passphrase, to_passphrase
from ..exceptions import ConfigurationError, UnsupportedAlgorithmError


class HashAlgorithm(str, Enum):
    """Hash algorithms for the body digest and the signing string"""
    SHA256 = "SHA-256"
    SHA512 = "SHA-512"


class SigningAlgorithm(str, Enum):
    """RSA signature padding schemes (ECDSA keys ignore this setting)"""
    PKCS1_V15 = "PKCS1-v15"
    RSASSA_PSS = "RSASSA-PSS"


# Signing header names with special handling
HEADER_REQUEST_TARGET = "(request-target)"
HEADER_CREATED = "(created)"
HEADER_EXPIRES = "(expires)"
HEADER_DATE = "Date"
HEADER_HOST = "Host"
HEADER_DIGEST = "Digest"
HEADER_AUTHORIZATION = "Authorization"

PSEUDO_HEADERS = (HEADER_REQUEST_TARGET, HEADER_CREATED, HEADER_EXPIRES)
DEFAULT_SIGNING_HEADERS: Tuple[str, ...] = (HEADER_CREATED,)

# The algorithm label is always hs2019; the real algorithm follows the key type
SIGNATURE_SCHEME = "hs2019"


def _coerce_enum(enum_cls, value, kind: str):
    if isinstance(value, enum_cls):
        return value
    for member in enum_cls:
        if isinstance(value, str) and value.replace("_", "-").upper() in (
            member.value.upper(), member.name.replace("_", "-").upper()
        ):
            return member
    raise UnsupportedAlgorithmError(value, kind)


@dataclass(frozen=True)
class SigningConfiguration:
    """
    Immutable signing configuration, validated once at construction

    Attributes:
        key_id: Key identifier placed in the Authorization header
        key_file_path: Path to the PEM private key file
        key_passphrase: Optional passphrase for encrypted keys
        signing_headers: Ordered header names to sign, ``("(created)",)`` when empty
        hash_algorithm: SHA-256 or SHA-512
        signing_algorithm: PKCS1-v15 or RSASSA-PSS (RSA keys only)
        validity_period_seconds: Added to ``(created)`` to form ``(expires)``
    """
    key_id: str
    key_file_path: Union[str, Path]
    key_passphrase: Optional[Passphrase] = None
    signing_headers: Sequence[str] = DEFAULT_SIGNING_HEADERS
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256
    signing_algorithm: SigningAlgorithm = SigningAlgorithm.PKCS1_V15
    validity_period_seconds: int = 0

    def __post_init__(self):
        """Validate and normalize the configuration"""
        if not self.key_id or not isinstance(self.key_id, str):
            raise ConfigurationError("Key ID must be a non-empty string", "INVALID_KEY_ID")

        if not self.key_file_path:
            raise ConfigurationError("Key file path is required", "INVALID_KEY_FILE")

        if isinstance(self.signing_headers, str):
            raise ConfigurationError(
                "Signing headers must be a sequence of header names",
                "INVALID_SIGNING_HEADERS"
            )
        headers = tuple(self.signing_headers or ()) or DEFAULT_SIGNING_HEADERS
        for header in headers:
            if not isinstance(header, str) or not header.strip():
                raise ConfigurationError(
                    "Signing header names must be non-empty strings",
                    "INVALID_SIGNING_HEADERS",
                    {"header": header}
                )
        lowered = [h.lower() for h in headers]
        if len(set(lowered)) != len(lowered):
            raise ConfigurationError(
                "Signing headers must not contain duplicates",
                "INVALID_SIGNING_HEADERS",
                {"signing_headers": list(headers)}
            )

        if isinstance(self.validity_period_seconds, bool) or not isinstance(self.validity_period_seconds, int) \
                or self.validity_period_seconds < 0:
            raise ConfigurationError(
                "Validity period must be a non-negative integer",
                "INVALID_VALIDITY_PERIOD",
                {"validity_period_seconds": self.validity_period_seconds}
            )

        # frozen dataclass: normalized values go through object.__setattr__
        object.__setattr__(self, 'signing_headers', headers)
        object.__setattr__(self, 'key_passphrase', to_passphrase(self.key_passphrase))
        object.__setattr__(
            self, 'hash_algorithm',
            _coerce_enum(HashAlgorithm, self.hash_algorithm, "hash algorithm")
        )
        object.__setattr__(
            self, 'signing_algorithm',
            _coerce_enum(SigningAlgorithm, self.signing_algorithm, "signing algorithm")
        )


@dataclass(frozen=True)
class RequestDescriptor:
    """
    Outgoing request as seen by the signer

    Attributes:
        method: HTTP method
        base_path: Scheme, host and base path (e.g. ``http://petstore.swagger.io/v2``)
        path_template: Path with ``{name}`` placeholders
        path_parameters: Placeholder name -> value
        query_parameters: Name -> ordered values (repeated keys allowed)
        header_parameters: Request headers, looked up case-insensitively
        body: Optional payload (str, bytes or a JSON-serializable object)
        query_string: Already-encoded query used verbatim instead of
            serializing ``query_parameters``
    """
    method: str
    base_path: str
    path_template: str = ""
    path_parameters: Mapping[str, Any] = field(default_factory=dict)
    query_parameters: Mapping[str, Sequence[Any]] = field(default_factory=dict)
    header_parameters: Mapping[str, Any] = field(default_factory=dict)
    body: Any = None
    query_string: Optional[str] = None

    def __post_init__(self):
        if not self.method:
            raise ValueError("Request method cannot be empty")
        if not self.base_path:
            raise ValueError("Request base path cannot be empty")

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        wanted = name.lower()
        for key, value in self.header_parameters.items():
            if key.lower() == wanted:
                return str(value)
        return None


@dataclass(frozen=True)
class ContentDigest:
    """
    Body digest

    Attributes:
        algorithm: Hash algorithm used
        digest: Base64-encoded digest bytes
        header_value: ``SHA-256=<digest>`` style header value
    """
    algorithm: HashAlgorithm
    digest: str
    header_value: str


@dataclass
class CanonicalSignatureInput:
    """
    Ordered signing input lines

    Attributes:
        components: Lowercase header name -> value, in signing header order
        literal_headers: Headers that must also be sent (Date, Host, Digest)
    """
    components: 'OrderedDict[str, str]' = field(default_factory=OrderedDict)
    literal_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def header_names(self) -> List[str]:
        return list(self.components.keys())

    def to_signing_string(self) -> str:
        """Join ``name: value`` lines with newlines, no trailing newline."""
        return "\n".join(f"{name}: {value}" for name, value in self.components.items())


@dataclass
class SignatureResult:
    """
    Generated signature result

    Attributes:
        algorithm: Always ``hs2019``
        signature: Base64-encoded signature bytes
        signed_headers: Lowercase names of the signed headers, in order
        created: ``(created)`` timestamp when it was signed
        expires: ``(expires)`` timestamp when it was signed
        authorization: Complete Authorization header value
        headers: All headers to merge into the request
        canonical_string: The exact string that was hashed and signed
    """
    algorithm: str
    signature: str
    signed_headers: List[str]
    authorization: str
    headers: Dict[str, str]
    canonical_string: str
    created: Optional[int] = None
    expires: Optional[int] = None

    @property
    def headers_parameter(self) -> str:
        return " ".join(self.signed_headers)


RequestBody = Union[str, bytes, None, Any]
