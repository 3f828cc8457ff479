"""
hs2019 HTTP signature header builder

This module provides the main signer: it canonicalizes a request, signs the
result with the configured private key and assembles the ``Authorization``
header together with the literal ``Date``/``Host``/``Digest`` headers.
"""

import logging
from typing import Dict, Optional

from ..crypto.keys import KeyMaterialCache, PrivateKeyMaterial, load_private_key
from ..exceptions import HttpSigningError
from .canonical_message import CanonicalMessageBuilder, validate_signing_headers
from .digest import calculate_digest
from .signature_engine import sign_string
from .signing_config import validate_signing_configuration
from .types import (
    RequestDescriptor,
    SignatureResult,
    SigningConfiguration,
    HEADER_AUTHORIZATION,
    HEADER_CREATED,
    HEADER_DIGEST,
    HEADER_EXPIRES,
    SIGNATURE_SCHEME,
)
from .utils import PerformanceTimer, generate_timestamp, normalize_header_name

logger = logging.getLogger(__name__)

SLOW_SIGNING_MS = 50.0


def format_authorization_header(
    key_id: str,
    signed_headers,
    signature: str,
    created: Optional[int] = None,
    expires: Optional[int] = None
) -> str:
    """
    Format the ``Authorization: Signature ...`` header value.

    ``created`` and ``expires`` clauses are emitted only when given.
    """
    value = f'Signature keyId="{key_id}",algorithm="{SIGNATURE_SCHEME}"'
    if created is not None:
        value += f",created={created}"
    if expires is not None:
        value += f",expires={expires}"
    value += f',headers="{" ".join(signed_headers)}",signature="{signature}"'
    return value


class HttpSigner:
    """
    hs2019 HTTP request signer

    One instance can be shared by concurrent requests: the configuration is
    immutable and the optional key cache is thread-safe.
    """

    def __init__(
        self,
        config: SigningConfiguration,
        key_cache: Optional[KeyMaterialCache] = None,
        slow_signing_ms: float = SLOW_SIGNING_MS
    ):
        """
        Initialize the signer with configuration.

        Args:
            config: Signing configuration
            key_cache: Optional cache so the key file is read once
            slow_signing_ms: Log a warning when a signature takes longer

        Raises:
            ConfigurationError: If configuration is invalid
        """
        validate_signing_configuration(config)
        self.config = config
        self.key_cache = key_cache
        self.slow_signing_ms = slow_signing_ms

    def sign_request(self, descriptor: RequestDescriptor, timestamp: Optional[int] = None) -> SignatureResult:
        """
        Sign a request.

        Args:
            descriptor: Request to sign
            timestamp: Frozen ``(created)`` time; defaults to now

        Returns:
            SignatureResult: Signature, Authorization value and headers to send

        Raises:
            HeaderNotFoundError: If a signed header is missing from the request
            KeyLoadError: If the private key cannot be loaded
            ConfigurationError: For unsupported algorithms
        """
        config = self.config

        # Fail on missing headers before any digest or key work
        validate_signing_headers(descriptor, list(config.signing_headers))

        created = generate_timestamp() if timestamp is None else int(timestamp)
        signed_names = [normalize_header_name(h) for h in config.signing_headers]

        content_digest = None
        if normalize_header_name(HEADER_DIGEST) in signed_names:
            content_digest = calculate_digest(descriptor.body, config.hash_algorithm)

        canonical = CanonicalMessageBuilder(descriptor, config, created, content_digest).build()
        canonical_string = canonical.to_signing_string()

        material = self._load_key()

        # Key file I/O is excluded from the timing
        timer = PerformanceTimer()
        signature = sign_string(
            material,
            canonical_string,
            config.hash_algorithm,
            config.signing_algorithm
        )

        created_param = int(canonical.components[HEADER_CREATED]) if HEADER_CREATED in canonical.components else None
        expires_param = int(canonical.components[HEADER_EXPIRES]) if HEADER_EXPIRES in canonical.components else None

        authorization = format_authorization_header(
            config.key_id,
            canonical.header_names,
            signature,
            created=created_param,
            expires=expires_param
        )

        headers: Dict[str, str] = dict(canonical.literal_headers)
        headers[HEADER_AUTHORIZATION] = authorization

        elapsed_ms = timer.elapsed_ms()
        if elapsed_ms > self.slow_signing_ms:
            logger.warning(f"Signing operation took {elapsed_ms:.2f}ms (target: <{self.slow_signing_ms:.0f}ms)")
        logger.debug(f"Signed {descriptor.method.upper()} request for key ID {config.key_id}")

        return SignatureResult(
            algorithm=SIGNATURE_SCHEME,
            signature=signature,
            signed_headers=canonical.header_names,
            authorization=authorization,
            headers=headers,
            canonical_string=canonical_string,
            created=created_param,
            expires=expires_param
        )

    def get_signed_headers(self, descriptor: RequestDescriptor, timestamp: Optional[int] = None) -> Dict[str, str]:
        """Header mapping (Date/Host/Digest as signed, plus Authorization)."""
        return self.sign_request(descriptor, timestamp).headers

    def _load_key(self) -> PrivateKeyMaterial:
        if self.key_cache is not None:
            return self.key_cache.get_or_load(self.config.key_file_path, self.config.key_passphrase)
        return load_private_key(self.config.key_file_path, self.config.key_passphrase)


def create_signer(config: SigningConfiguration, key_cache: Optional[KeyMaterialCache] = None) -> HttpSigner:
    """
    Create a new HTTP signer.

    Args:
        config: Signing configuration
        key_cache: Optional shared key cache

    Returns:
        HttpSigner: Configured signer instance
    """
    return HttpSigner(config, key_cache=key_cache)


def sign_request(
    descriptor: RequestDescriptor,
    config: SigningConfiguration,
    timestamp: Optional[int] = None
) -> SignatureResult:
    """
    Sign a request with the given configuration.

    Args:
        descriptor: Request to sign
        config: Signing configuration
        timestamp: Optional frozen timestamp

    Returns:
        SignatureResult: Signing result
    """
    return create_signer(config).sign_request(descriptor, timestamp)


def get_http_signed_headers(
    descriptor: RequestDescriptor,
    config: SigningConfiguration,
    timestamp: Optional[int] = None
) -> Dict[str, str]:
    """Header mapping to merge into the outgoing request."""
    try:
        return sign_request(descriptor, config, timestamp).headers
    except HttpSigningError as e:
        logger.error(f"Request signing failed: {e}")
        raise
