"""
HTTP Signing SDK - Request Signing Module

hs2019 HTTP signatures with RSA (PKCS#1 v1.5 / PSS) and ECDSA keys. This
module canonicalizes outgoing requests, signs them and builds the
``Authorization`` header expected by signature-protected APIs.
"""

from .types import (
    RequestDescriptor,
    SigningConfiguration,
    CanonicalSignatureInput,
    SignatureResult,
    ContentDigest,
    HashAlgorithm,
    SigningAlgorithm,
    SIGNATURE_SCHEME,
    PSEUDO_HEADERS,
    DEFAULT_SIGNING_HEADERS,
)

from .http_signer import (
    HttpSigner,
    create_signer,
    sign_request,
    get_http_signed_headers,
    format_authorization_header,
)

from .canonical_message import (
    CanonicalMessageBuilder,
    build_canonical_input,
    build_signing_string,
    validate_signing_headers,
)

from .digest import (
    calculate_digest,
)

from .signature_engine import (
    Hasher,
    Signer,
    RSASigner,
    ECDSASigner,
    create_key_signer,
    sign_string,
)

from .signing_config import (
    SigningConfigurationBuilder,
    SigningProfile,
    SIGNING_PROFILES,
    MINIMAL_SIGNING_HEADERS,
    STANDARD_SIGNING_HEADERS,
    STRICT_SIGNING_HEADERS,
    create_signing_config,
    create_from_profile,
)

from .utils import (
    generate_timestamp,
    format_http_date,
    build_query_string,
    build_request_path,
    normalize_header_name,
    serialize_body,
)

from .integration import (
    HttpSignatureAuth,
    SigningSession,
    create_signing_session,
    sign_prepared_request,
)

# Public API exports
__all__ = [
    # Core signing functionality
    'HttpSigner',
    'create_signer',
    'sign_request',
    'get_http_signed_headers',
    'format_authorization_header',
    # Types
    'RequestDescriptor',
    'SigningConfiguration',
    'CanonicalSignatureInput',
    'SignatureResult',
    'ContentDigest',
    'HashAlgorithm',
    'SigningAlgorithm',
    'SIGNATURE_SCHEME',
    'PSEUDO_HEADERS',
    'DEFAULT_SIGNING_HEADERS',
    # Canonicalization
    'CanonicalMessageBuilder',
    'build_canonical_input',
    'build_signing_string',
    'validate_signing_headers',
    'calculate_digest',
    # Signature engine
    'Hasher',
    'Signer',
    'RSASigner',
    'ECDSASigner',
    'create_key_signer',
    'sign_string',
    # Configuration
    'SigningConfigurationBuilder',
    'SigningProfile',
    'SIGNING_PROFILES',
    'MINIMAL_SIGNING_HEADERS',
    'STANDARD_SIGNING_HEADERS',
    'STRICT_SIGNING_HEADERS',
    'create_signing_config',
    'create_from_profile',
    # Utilities
    'generate_timestamp',
    'format_http_date',
    'build_query_string',
    'build_request_path',
    'normalize_header_name',
    'serialize_body',
    # HTTP Integration
    'HttpSignatureAuth',
    'SigningSession',
    'create_signing_session',
    'sign_prepared_request',
]
