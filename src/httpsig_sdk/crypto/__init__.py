"""
Key handling for the HTTP signing SDK

PEM parsing, a minimal DER codec, legacy OpenSSL PEM decryption and private
key loading for RSA and EC keys.
"""

from .der import (
    DerReader,
    encode_integer,
    encode_length,
    encode_sequence,
    ecdsa_raw_to_der,
    ecdsa_der_to_raw,
)
from .pem import (
    KeyType,
    PemBlock,
    parse_pem,
    load_key_block,
)
from .legacy_pem import (
    derive_legacy_key,
    decrypt_legacy_pem,
)
from .keys import (
    RSAKeyMaterial,
    ECKeyMaterial,
    PrivateKeyMaterial,
    KeyMaterialCache,
    load_private_key,
    detect_key_type,
    parse_pkcs1_private_key,
)
from .secret import (
    Passphrase,
    to_passphrase,
    zero_buffer,
)

__all__ = [
    # DER
    'DerReader',
    'encode_integer',
    'encode_length',
    'encode_sequence',
    'ecdsa_raw_to_der',
    'ecdsa_der_to_raw',
    # PEM
    'KeyType',
    'PemBlock',
    'parse_pem',
    'load_key_block',
    # Legacy encryption
    'derive_legacy_key',
    'decrypt_legacy_pem',
    # Key loading
    'RSAKeyMaterial',
    'ECKeyMaterial',
    'PrivateKeyMaterial',
    'KeyMaterialCache',
    'load_private_key',
    'detect_key_type',
    'parse_pkcs1_private_key',
    # Secrets
    'Passphrase',
    'to_passphrase',
    'zero_buffer',
]
