"""
Request body digest for the Digest header
"""

import base64

from cryptography.hazmat.primitives import hashes

from ..exceptions import UnsupportedAlgorithmError
from .types import ContentDigest, HashAlgorithm, RequestBody
from .utils import serialize_body

_HASHES = {
    HashAlgorithm.SHA256: hashes.SHA256,
    HashAlgorithm.SHA512: hashes.SHA512,
}


def resolve_hash_algorithm(algorithm) -> HashAlgorithm:
    """
    Validate a configured hash algorithm.

    Raises:
        UnsupportedAlgorithmError: For anything but SHA-256 and SHA-512
    """
    try:
        return HashAlgorithm(algorithm)
    except ValueError as e:
        raise UnsupportedAlgorithmError(algorithm, "hash algorithm") from e


def get_hash_algorithm(algorithm: HashAlgorithm) -> hashes.HashAlgorithm:
    """Map a configured hash algorithm to a cryptography hash instance."""
    return _HASHES[resolve_hash_algorithm(algorithm)]()


def compute_hash(data: bytes, algorithm: HashAlgorithm) -> bytes:
    digest = hashes.Hash(get_hash_algorithm(algorithm))
    digest.update(data)
    return digest.finalize()


def calculate_digest(
    body: RequestBody,
    algorithm: HashAlgorithm = HashAlgorithm.SHA256
) -> ContentDigest:
    """
    Calculate the Digest header value for a request body.

    Args:
        body: Request body; None and empty bodies hash the empty byte string
        algorithm: SHA-256 or SHA-512

    Returns:
        ContentDigest: Digest with ``SHA-256=<base64>`` style header value

    Raises:
        UnsupportedAlgorithmError: If the algorithm is not supported
    """
    algorithm = resolve_hash_algorithm(algorithm)
    digest_b64 = base64.b64encode(compute_hash(serialize_body(body), algorithm)).decode('ascii')
    return ContentDigest(
        algorithm=algorithm,
        digest=digest_b64,
        header_value=f"{algorithm.value}={digest_b64}"
    )
