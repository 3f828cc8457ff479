"""
Private key loading for request signing

This module reads PEM (or unarmored DER) key files and turns them into
:class:`RSAKeyMaterial` or :class:`ECKeyMaterial`. PKCS#1 RSA keys, including
legacy OpenSSL encrypted ones, are decoded with the SDK's own DER reader; EC
and PKCS#8 keys go through the cryptography package's private key import.
"""

import binascii
import logging
import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from ..exceptions import (
    KeyDecryptionError,
    KeyFileNotFoundError,
    KeyLoadError,
    KeyParseError,
    UnsupportedKeyTypeError,
)
from .der import DerReader
from .legacy_pem import decrypt_legacy_pem
from .pem import KeyType, PemBlock, load_key_block
from .secret import Passphrase, to_passphrase

logger = logging.getLogger(__name__)

PKCS1_VERSION = 0


@dataclass(frozen=True)
class RSAKeyMaterial:
    """
    RSA private key parameters as stored in a PKCS#1 RSAPrivateKey

    Attributes:
        modulus: n
        public_exponent: e
        private_exponent: d
        prime1: p
        prime2: q
        exponent1: d mod (p-1)
        exponent2: d mod (q-1)
        coefficient: q^-1 mod p
    """
    modulus: int
    public_exponent: int
    private_exponent: int
    prime1: int
    prime2: int
    exponent1: int
    exponent2: int
    coefficient: int

    key_type = KeyType.RSA

    @property
    def key_size(self) -> int:
        return self.modulus.bit_length()

    def to_private_key(self) -> rsa.RSAPrivateKey:
        try:
            return rsa.RSAPrivateNumbers(
                p=self.prime1,
                q=self.prime2,
                d=self.private_exponent,
                dmp1=self.exponent1,
                dmq1=self.exponent2,
                iqmp=self.coefficient,
                public_numbers=rsa.RSAPublicNumbers(self.public_exponent, self.modulus),
            ).private_key()
        except ValueError as e:
            raise KeyParseError(f"Inconsistent RSA key parameters: {e}") from e

    def __repr__(self) -> str:
        return f"RSAKeyMaterial(key_size={self.key_size})"

    @classmethod
    def from_private_key(cls, key: rsa.RSAPrivateKey) -> 'RSAKeyMaterial':
        numbers = key.private_numbers()
        return cls(
            modulus=numbers.public_numbers.n,
            public_exponent=numbers.public_numbers.e,
            private_exponent=numbers.d,
            prime1=numbers.p,
            prime2=numbers.q,
            exponent1=numbers.dmp1,
            exponent2=numbers.dmq1,
            coefficient=numbers.iqmp,
        )


@dataclass(frozen=True)
class ECKeyMaterial:
    """
    EC private key: named curve and private scalar

    Attributes:
        curve: Curve instance from ``cryptography`` (e.g. SECP256R1)
        private_value: Private scalar
    """
    curve: ec.EllipticCurve
    private_value: int

    key_type = KeyType.EC

    @property
    def key_size(self) -> int:
        return self.curve.key_size

    @property
    def signature_width(self) -> int:
        """Byte width of each of r and s in a raw signature."""
        return (self.curve.key_size + 7) // 8

    def to_private_key(self) -> ec.EllipticCurvePrivateKey:
        try:
            return ec.derive_private_key(self.private_value, self.curve)
        except ValueError as e:
            raise KeyParseError(f"Invalid EC private scalar: {e}") from e

    def __repr__(self) -> str:
        return f"ECKeyMaterial(curve={self.curve.name})"


PrivateKeyMaterial = Union[RSAKeyMaterial, ECKeyMaterial]


def parse_pkcs1_private_key(der: bytes) -> RSAKeyMaterial:
    """
    Parse a PKCS#1 RSAPrivateKey DER structure.

    The structure is a SEQUENCE of nine INTEGERs: version followed by
    n, e, d, p, q, dp, dq and qinv.

    Raises:
        KeyParseError: On unexpected tags, short reads or a bad version
    """
    reader = DerReader(der)
    sequence = reader.enter_sequence()

    version = sequence.read_integer_value()
    if version != PKCS1_VERSION:
        raise KeyParseError(
            f"Unsupported PKCS#1 version: {version}",
            {"version": version}
        )

    fields = [sequence.read_integer_value() for _ in range(8)]
    if not sequence.at_end():
        raise KeyParseError("Unexpected data after PKCS#1 key fields")

    return RSAKeyMaterial(*fields)


def _material_from_private_key(key) -> PrivateKeyMaterial:
    if isinstance(key, rsa.RSAPrivateKey):
        return RSAKeyMaterial.from_private_key(key)
    if isinstance(key, ec.EllipticCurvePrivateKey):
        return ECKeyMaterial(curve=key.curve, private_value=key.private_numbers().private_value)
    raise UnsupportedKeyTypeError(
        f"Unsupported private key algorithm: {type(key).__name__}",
        {"algorithm": type(key).__name__}
    )


def _load_rsa(block: PemBlock, passphrase: Optional[Passphrase]) -> RSAKeyMaterial:
    if not block.headers:
        try:
            der = block.decode_body()
        except (binascii.Error, ValueError) as e:
            raise KeyParseError("RSA private key body is not valid base64") from e
        return parse_pkcs1_private_key(der)

    try:
        ciphertext = block.decode_body()
    except (binascii.Error, ValueError) as e:
        raise KeyDecryptionError("Encrypted RSA private key body is not valid base64") from e

    der = decrypt_legacy_pem(block.headers, ciphertext, passphrase)
    try:
        return parse_pkcs1_private_key(der)
    except KeyParseError as e:
        # Decryption with the wrong key can still yield valid padding
        raise KeyDecryptionError("Failed to decrypt private key: bad passphrase or corrupt data") from e


def _import_with_cryptography(block: PemBlock, pem_text: bytes, passphrase: Optional[Passphrase]) -> PrivateKeyMaterial:
    """Import EC or PKCS#8 key data with the cryptography package."""
    def _load(password: Optional[bytes]):
        if block.headers:
            return serialization.load_pem_private_key(pem_text, password=password)
        try:
            der = block.decode_body()
        except (binascii.Error, ValueError) as e:
            raise KeyParseError("Private key body is not valid base64") from e
        return serialization.load_der_private_key(der, password=password)

    try:
        if passphrase is None:
            key = _load(None)
        else:
            with passphrase.reveal() as password:
                try:
                    key = _load(bytes(password))
                except TypeError:
                    # Key is not encrypted; the passphrase is ignored as for plain RSA keys
                    key = _load(None)
    except KeyLoadError:
        raise
    except TypeError as e:
        raise KeyDecryptionError("Private key is encrypted but no passphrase was provided") from e
    except ValueError as e:
        if passphrase is not None and _looks_encrypted(block):
            raise KeyDecryptionError("Failed to decrypt private key: bad passphrase or corrupt data") from e
        raise KeyParseError(f"Could not decode private key: {e}") from e
    except UnsupportedAlgorithm as e:
        raise UnsupportedKeyTypeError(f"Unsupported private key algorithm: {e}") from e

    return _material_from_private_key(key)


def _looks_encrypted(block: PemBlock) -> bool:
    if block.is_encrypted or block.label == "ENCRYPTED PRIVATE KEY":
        return True
    # EncryptedPrivateKeyInfo starts with an AlgorithmIdentifier SEQUENCE
    try:
        reader = DerReader(block.decode_body())
        return reader.enter_sequence().peek_tag() == 0x30
    except (KeyParseError, binascii.Error, ValueError):
        return False


def load_private_key(
    key_file_path: Union[str, Path],
    passphrase: Union[None, str, bytes, Passphrase] = None
) -> PrivateKeyMaterial:
    """
    Load private key material from a key file.

    Args:
        key_file_path: Path to a PEM (or DER) private key file
        passphrase: Optional passphrase for encrypted keys

    Returns:
        PrivateKeyMaterial: RSA or EC key material

    Raises:
        KeyFileNotFoundError: If the file does not exist
        UnsupportedKeyTypeError: If the armor or algorithm is not supported
        KeyDecryptionError: On a wrong passphrase or corrupt ciphertext
        KeyParseError: On malformed key structures
    """
    path = Path(key_file_path)
    if not path.is_file():
        raise KeyFileNotFoundError(str(path))

    try:
        data = path.read_bytes()
    except OSError as e:
        raise KeyFileNotFoundError(str(path)) from e

    passphrase = to_passphrase(passphrase)
    block = load_key_block(data)
    key_type = block.key_type

    if key_type == KeyType.RSA:
        material = _load_rsa(block, passphrase)
    elif key_type in (KeyType.EC, KeyType.PKCS8):
        material = _import_with_cryptography(block, data, passphrase)
        if key_type == KeyType.EC and not isinstance(material, ECKeyMaterial):
            raise UnsupportedKeyTypeError(
                "EC PRIVATE KEY armor does not contain an EC key",
                {"path": str(path)}
            )
    else:
        raise UnsupportedKeyTypeError(
            "Either the key is invalid or key is not supported",
            {"path": str(path), "label": block.label}
        )

    logger.debug(f"Loaded {material.key_type.value} private key from {path}")
    return material


def detect_key_type(key_file_path: Union[str, Path]) -> KeyType:
    """Classify a key file by its armor without decoding the key."""
    path = Path(key_file_path)
    if not path.is_file():
        raise KeyFileNotFoundError(str(path))
    key_type = load_key_block(path.read_bytes()).key_type
    if key_type == KeyType.UNSUPPORTED:
        raise UnsupportedKeyTypeError(
            "Either the key is invalid or key is not supported",
            {"path": str(path)}
        )
    return key_type


class KeyMaterialCache:
    """
    Thread-safe cache of loaded key material

    Entries are keyed by absolute file path and the passphrase fingerprint,
    never by the passphrase itself.
    """

    def __init__(self, max_size: int = 32):
        self.max_size = max_size
        self._entries: Dict[Tuple[str, str], PrivateKeyMaterial] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _cache_key(key_file_path: Union[str, Path], passphrase: Optional[Passphrase]) -> Tuple[str, str]:
        fingerprint = passphrase.fingerprint() if passphrase is not None else ""
        return os.path.abspath(str(key_file_path)), fingerprint

    def get_or_load(
        self,
        key_file_path: Union[str, Path],
        passphrase: Union[None, str, bytes, Passphrase] = None
    ) -> PrivateKeyMaterial:
        passphrase = to_passphrase(passphrase)
        cache_key = self._cache_key(key_file_path, passphrase)

        with self._lock:
            material = self._entries.get(cache_key)
            if material is not None:
                return material

        material = load_private_key(key_file_path, passphrase)

        with self._lock:
            existing = self._entries.get(cache_key)
            if existing is not None:
                return existing
            while len(self._entries) >= self.max_size:
                self._entries.pop(next(iter(self._entries)))
            self._entries[cache_key] = material
        return material

    def invalidate(self, key_file_path: Union[str, Path]) -> None:
        """Drop every entry for the given key file."""
        path = os.path.abspath(str(key_file_path))
        with self._lock:
            for cache_key in [k for k in self._entries if k[0] == path]:
                del self._entries[cache_key]

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
