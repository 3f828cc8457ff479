"""
Signature engine for hs2019 request signatures

The signing string is hashed once with the configured algorithm and the
digest is signed by a key-type specific :class:`Signer`. RSA keys use
PKCS#1 v1.5 or PSS padding; EC keys produce ``r || s`` which is then
re-encoded as an ASN.1 DER ``SEQUENCE { INTEGER r, INTEGER s }``.
"""

import base64
import logging
from abc import ABC, abstractmethod
from typing import Union

from cryptography.hazmat.primitives.asymmetric import ec, padding
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, decode_dss_signature

from ..crypto.der import ecdsa_raw_to_der
from ..crypto.keys import ECKeyMaterial, PrivateKeyMaterial, RSAKeyMaterial
from ..exceptions import UnsupportedAlgorithmError, UnsupportedKeyTypeError
from .digest import compute_hash, get_hash_algorithm, resolve_hash_algorithm
from .types import HashAlgorithm, SigningAlgorithm

logger = logging.getLogger(__name__)


class Hasher:
    """Hashes signing strings with the configured algorithm."""

    def __init__(self, algorithm: HashAlgorithm):
        self.algorithm = resolve_hash_algorithm(algorithm)

    def hash(self, data: Union[str, bytes]) -> bytes:
        if isinstance(data, str):
            data = data.encode('utf-8')
        return compute_hash(data, self.algorithm)

    def prehashed(self) -> Prehashed:
        return Prehashed(get_hash_algorithm(self.algorithm))


class Signer(ABC):
    """Signs a precomputed digest; one implementation per key type."""

    def __init__(self, hasher: Hasher):
        self.hasher = hasher

    @abstractmethod
    def sign_digest(self, digest: bytes) -> bytes:
        """Sign a digest produced by ``self.hasher``"""
        pass

    def sign(self, data: Union[str, bytes]) -> bytes:
        return self.sign_digest(self.hasher.hash(data))


class RSASigner(Signer):
    """RSA signer with PKCS#1 v1.5 or PSS padding"""

    def __init__(self, material: RSAKeyMaterial, hasher: Hasher, signing_algorithm: SigningAlgorithm):
        super().__init__(hasher)
        self.private_key = material.to_private_key()
        self.padding = self._build_padding(signing_algorithm)

    def _build_padding(self, signing_algorithm: SigningAlgorithm):
        if signing_algorithm == SigningAlgorithm.PKCS1_V15:
            return padding.PKCS1v15()
        if signing_algorithm == SigningAlgorithm.RSASSA_PSS:
            return padding.PSS(
                mgf=padding.MGF1(get_hash_algorithm(self.hasher.algorithm)),
                salt_length=padding.PSS.DIGEST_LENGTH
            )
        raise UnsupportedAlgorithmError(signing_algorithm, "signing algorithm")

    def sign_digest(self, digest: bytes) -> bytes:
        return self.private_key.sign(digest, self.padding, self.hasher.prehashed())


class ECDSASigner(Signer):
    """ECDSA signer producing DER encoded signatures"""

    def __init__(self, material: ECKeyMaterial, hasher: Hasher):
        super().__init__(hasher)
        self.private_key = material.to_private_key()
        self.width = material.signature_width

    def sign_raw(self, digest: bytes) -> bytes:
        """Sign and return the fixed-width ``r || s`` form."""
        der = self.private_key.sign(digest, ec.ECDSA(self.hasher.prehashed()))
        r, s = decode_dss_signature(der)
        return r.to_bytes(self.width, 'big') + s.to_bytes(self.width, 'big')

    def sign_digest(self, digest: bytes) -> bytes:
        return ecdsa_raw_to_der(self.sign_raw(digest))


def create_key_signer(
    material: PrivateKeyMaterial,
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    signing_algorithm: SigningAlgorithm = SigningAlgorithm.PKCS1_V15
) -> Signer:
    """
    Create the signer matching the loaded key type.

    Args:
        material: Loaded private key material
        hash_algorithm: Hash applied to the signing string
        signing_algorithm: RSA padding scheme (ignored for EC keys)

    Returns:
        Signer: RSASigner or ECDSASigner

    Raises:
        UnsupportedAlgorithmError: For an unknown hash or padding scheme
        UnsupportedKeyTypeError: For key material of another type
    """
    hasher = Hasher(hash_algorithm)
    if isinstance(material, RSAKeyMaterial):
        return RSASigner(material, hasher, signing_algorithm)
    if isinstance(material, ECKeyMaterial):
        return ECDSASigner(material, hasher)
    raise UnsupportedKeyTypeError(
        f"No signer for key material {type(material).__name__}",
        {"material": type(material).__name__}
    )


def sign_string(
    material: PrivateKeyMaterial,
    signing_string: str,
    hash_algorithm: HashAlgorithm = HashAlgorithm.SHA256,
    signing_algorithm: SigningAlgorithm = SigningAlgorithm.PKCS1_V15
) -> str:
    """
    Sign a canonical signing string.

    Returns:
        str: Base64-encoded signature
    """
    signer = create_key_signer(material, hash_algorithm, signing_algorithm)
    signature = signer.sign(signing_string)
    logger.debug(f"Signed {len(signing_string)} byte signing string with {type(signer).__name__}")
    return base64.b64encode(signature).decode('ascii')
