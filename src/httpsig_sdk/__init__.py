"""
HTTP Signing Python SDK
hs2019 request signing with RSA and ECDSA private keys
"""

from .version import __version__
from .exceptions import (
    HttpSigningError,
    ConfigurationError,
    UnsupportedAlgorithmError,
    KeyLoadError,
    KeyFileNotFoundError,
    UnsupportedKeyTypeError,
    KeyDecryptionError,
    KeyParseError,
    HeaderNotFoundError,
)
from .crypto import (
    KeyType,
    RSAKeyMaterial,
    ECKeyMaterial,
    KeyMaterialCache,
    Passphrase,
    load_private_key,
    detect_key_type,
)
from .signing import (
    # Core signing functionality
    HttpSigner,
    create_signer,
    sign_request,
    get_http_signed_headers,
    format_authorization_header,
    # Types
    RequestDescriptor,
    SigningConfiguration,
    SignatureResult,
    ContentDigest,
    HashAlgorithm,
    SigningAlgorithm,
    SIGNATURE_SCHEME,
    # Configuration
    SigningConfigurationBuilder,
    create_signing_config,
    create_from_profile,
    calculate_digest,
    # HTTP Integration
    HttpSignatureAuth,
    SigningSession,
    create_signing_session,
)
from .config import (
    SdkConfig,
    LoggingConfig,
    configure_logging,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
)

__all__ = [
    '__version__',
    # Exceptions
    'HttpSigningError',
    'ConfigurationError',
    'UnsupportedAlgorithmError',
    'KeyLoadError',
    'KeyFileNotFoundError',
    'UnsupportedKeyTypeError',
    'KeyDecryptionError',
    'KeyParseError',
    'HeaderNotFoundError',
    # Keys
    'KeyType',
    'RSAKeyMaterial',
    'ECKeyMaterial',
    'KeyMaterialCache',
    'Passphrase',
    'load_private_key',
    'detect_key_type',
    # Signing
    'HttpSigner',
    'create_signer',
    'sign_request',
    'get_http_signed_headers',
    'format_authorization_header',
    'RequestDescriptor',
    'SigningConfiguration',
    'SignatureResult',
    'ContentDigest',
    'HashAlgorithm',
    'SigningAlgorithm',
    'SIGNATURE_SCHEME',
    'SigningConfigurationBuilder',
    'create_signing_config',
    'create_from_profile',
    'calculate_digest',
    'HttpSignatureAuth',
    'SigningSession',
    'create_signing_session',
    # Configuration
    'SdkConfig',
    'LoggingConfig',
    'configure_logging',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
]
