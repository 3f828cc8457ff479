"""
Configuration management for request signing

This module provides a fluent builder for :class:`SigningConfiguration`,
named header profiles and configuration validation.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..crypto.secret import Passphrase
from ..exceptions import ConfigurationError
from .types import (
    HashAlgorithm,
    SigningAlgorithm,
    SigningConfiguration,
    DEFAULT_SIGNING_HEADERS,
    HEADER_CREATED,
    HEADER_DATE,
    HEADER_DIGEST,
    HEADER_EXPIRES,
    HEADER_HOST,
    HEADER_REQUEST_TARGET,
)

# Header sets for common deployments
MINIMAL_SIGNING_HEADERS: Tuple[str, ...] = DEFAULT_SIGNING_HEADERS

STANDARD_SIGNING_HEADERS: Tuple[str, ...] = (
    HEADER_REQUEST_TARGET,
    HEADER_CREATED,
    HEADER_DIGEST,
)

STRICT_SIGNING_HEADERS: Tuple[str, ...] = (
    HEADER_REQUEST_TARGET,
    HEADER_CREATED,
    HEADER_EXPIRES,
    HEADER_HOST,
    HEADER_DATE,
    HEADER_DIGEST,
)


@dataclass(frozen=True)
class SigningProfile:
    """
    Named signing header profile

    Attributes:
        name: Profile name
        description: Profile description
        signing_headers: Headers covered by the signature
        hash_algorithm: Hash for the digest and signing string
        validity_period_seconds: Validity used for ``(expires)``
    """
    name: str
    description: str
    signing_headers: Tuple[str, ...]
    hash_algorithm: HashAlgorithm
    validity_period_seconds: int


SIGNING_PROFILES: Dict[str, SigningProfile] = {
    'strict': SigningProfile(
        name='Strict',
        description='Covers target, timing, host, date and body digest',
        signing_headers=STRICT_SIGNING_HEADERS,
        hash_algorithm=HashAlgorithm.SHA512,
        validity_period_seconds=300
    ),

    'standard': SigningProfile(
        name='Standard',
        description='Request target, creation time and body digest',
        signing_headers=STANDARD_SIGNING_HEADERS,
        hash_algorithm=HashAlgorithm.SHA256,
        validity_period_seconds=0
    ),

    'minimal': SigningProfile(
        name='Minimal',
        description='Creation time only',
        signing_headers=MINIMAL_SIGNING_HEADERS,
        hash_algorithm=HashAlgorithm.SHA256,
        validity_period_seconds=0
    ),
}


class SigningConfigurationBuilder:
    """
    Builder for creating signing configurations with fluent API
    """

    def __init__(self):
        self._key_id: Optional[str] = None
        self._key_file_path: Optional[Union[str, Path]] = None
        self._key_passphrase: Optional[Passphrase] = None
        self._signing_headers: List[str] = []
        self._hash_algorithm: Union[str, HashAlgorithm] = HashAlgorithm.SHA256
        self._signing_algorithm: Union[str, SigningAlgorithm] = SigningAlgorithm.PKCS1_V15
        self._validity_period_seconds: int = 0

    def key_id(self, key_id: str) -> 'SigningConfigurationBuilder':
        """
        Set key identifier.

        Args:
            key_id: Key identifier for the Authorization header

        Returns:
            SigningConfigurationBuilder: Self for method chaining
        """
        self._key_id = key_id
        return self

    def key_file(
        self,
        path: Union[str, Path],
        passphrase: Union[None, str, bytes, Passphrase] = None
    ) -> 'SigningConfigurationBuilder':
        """
        Set the private key file and optional passphrase.

        Returns:
            SigningConfigurationBuilder: Self for method chaining
        """
        self._key_file_path = path
        if passphrase is not None:
            self._key_passphrase = passphrase if isinstance(passphrase, Passphrase) else Passphrase(passphrase)
        return self

    def headers(self, headers: Sequence[str]) -> 'SigningConfigurationBuilder':
        """Replace the signing header list, keeping the given order."""
        self._signing_headers = list(headers)
        return self

    def add_header(self, header: str) -> 'SigningConfigurationBuilder':
        """Append a signing header unless already present (case-insensitive)."""
        if header.lower() not in [h.lower() for h in self._signing_headers]:
            self._signing_headers.append(header)
        return self

    def hash_algorithm(self, algorithm: Union[str, HashAlgorithm]) -> 'SigningConfigurationBuilder':
        self._hash_algorithm = algorithm
        return self

    def signing_algorithm(self, algorithm: Union[str, SigningAlgorithm]) -> 'SigningConfigurationBuilder':
        self._signing_algorithm = algorithm
        return self

    def validity_period(self, seconds: int) -> 'SigningConfigurationBuilder':
        self._validity_period_seconds = seconds
        return self

    def profile(self, profile_name: str) -> 'SigningConfigurationBuilder':
        """
        Apply a signing profile.

        Args:
            profile_name: 'strict', 'standard' or 'minimal'

        Returns:
            SigningConfigurationBuilder: Self for method chaining

        Raises:
            ConfigurationError: If profile name is invalid
        """
        profile = get_signing_profile(profile_name)
        self._signing_headers = list(profile.signing_headers)
        self._hash_algorithm = profile.hash_algorithm
        self._validity_period_seconds = profile.validity_period_seconds
        return self

    def build(self) -> SigningConfiguration:
        """
        Build the signing configuration.

        Returns:
            SigningConfiguration: Validated immutable configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self._key_id is None:
            raise ConfigurationError("Key ID is required", "INVALID_CONFIG")

        if self._key_file_path is None:
            raise ConfigurationError("Key file path is required", "INVALID_CONFIG")

        return SigningConfiguration(
            key_id=self._key_id,
            key_file_path=self._key_file_path,
            key_passphrase=self._key_passphrase,
            signing_headers=tuple(self._signing_headers),
            hash_algorithm=self._hash_algorithm,
            signing_algorithm=self._signing_algorithm,
            validity_period_seconds=self._validity_period_seconds
        )


def create_signing_config() -> SigningConfigurationBuilder:
    """
    Create a new signing configuration builder.

    Returns:
        SigningConfigurationBuilder: New configuration builder
    """
    return SigningConfigurationBuilder()


def create_from_profile(
    profile_name: str,
    key_id: str,
    key_file_path: Union[str, Path],
    passphrase: Union[None, str, bytes, Passphrase] = None
) -> SigningConfiguration:
    """
    Create signing configuration from a named profile.

    Raises:
        ConfigurationError: If profile or parameters are invalid
    """
    return (create_signing_config()
            .profile(profile_name)
            .key_id(key_id)
            .key_file(key_file_path, passphrase)
            .build())


def validate_signing_configuration(config: SigningConfiguration) -> None:
    """
    Validate signing configuration.

    Args:
        config: Signing configuration to validate

    Raises:
        ConfigurationError: If configuration is invalid
    """
    if not isinstance(config, SigningConfiguration):
        raise ConfigurationError(
            "Configuration must be SigningConfiguration instance",
            "INVALID_CONFIG"
        )

    if not isinstance(config.hash_algorithm, HashAlgorithm):
        raise ConfigurationError(f"Unsupported hash algorithm: {config.hash_algorithm}", "UNSUPPORTED_ALGORITHM")

    if not isinstance(config.signing_algorithm, SigningAlgorithm):
        raise ConfigurationError(
            f"Unsupported signing algorithm: {config.signing_algorithm}",
            "UNSUPPORTED_ALGORITHM"
        )

    if config.key_passphrase is not None and config.key_passphrase.cleared:
        raise ConfigurationError("Key passphrase has been cleared", "PASSPHRASE_CLEARED")


def get_signing_profile(name: str) -> SigningProfile:
    """
    Get signing profile by name.

    Raises:
        ConfigurationError: If profile name is invalid
    """
    if name not in SIGNING_PROFILES:
        raise ConfigurationError(
            f"Unknown signing profile: {name}",
            "INVALID_CONFIG",
            {"available_profiles": list(SIGNING_PROFILES.keys())}
        )

    return SIGNING_PROFILES[name]


def list_signing_profiles() -> List[str]:
    """
    List available signing profile names.

    Returns:
        list: List of available profile names
    """
    return list(SIGNING_PROFILES.keys())
