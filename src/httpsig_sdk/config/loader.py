"""
Configuration loading for the HTTP Signing SDK

Loads signing and logging settings from JSON (string, file or dict) with
environment variable overrides for the key identity.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from ..exceptions import ConfigurationError
from ..signing.signing_config import SigningConfigurationBuilder
from ..signing.types import SigningConfiguration

logger = logging.getLogger(__name__)

ENV_KEY_ID = "HTTPSIG_KEY_ID"
ENV_KEY_FILE = "HTTPSIG_KEY_FILE"
ENV_KEY_PASSPHRASE = "HTTPSIG_KEY_PASSPHRASE"

PACKAGE_LOGGER = "httpsig_sdk"
DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "WARNING"
    format: str = DEFAULT_LOG_FORMAT


@dataclass
class SdkConfig:
    """Loaded SDK configuration"""
    signing: SigningConfiguration
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _apply_env_overrides(signing_data: Dict[str, Any], environ: Mapping[str, str]) -> Dict[str, Any]:
    merged = dict(signing_data)
    if environ.get(ENV_KEY_ID):
        merged["key_id"] = environ[ENV_KEY_ID]
    if environ.get(ENV_KEY_FILE):
        merged["key_file"] = environ[ENV_KEY_FILE]
    if environ.get(ENV_KEY_PASSPHRASE):
        merged["key_passphrase"] = environ[ENV_KEY_PASSPHRASE]
    return merged


def _parse_signing(data: Dict[str, Any]) -> SigningConfiguration:
    builder = SigningConfigurationBuilder()

    profile = data.get("profile")
    if profile is not None:
        builder.profile(profile)

    builder.key_id(data["key_id"])
    builder.key_file(data["key_file"], data.get("key_passphrase"))

    if "signing_headers" in data:
        headers = data["signing_headers"]
        if not isinstance(headers, list):
            raise TypeError("signing_headers must be a list")
        builder.headers(headers)
    if "hash_algorithm" in data:
        builder.hash_algorithm(data["hash_algorithm"])
    if "signing_algorithm" in data:
        builder.signing_algorithm(data["signing_algorithm"])
    if "validity_period_seconds" in data:
        builder.validity_period(data["validity_period_seconds"])

    return builder.build()


def load_config_from_dict(
    data: Dict[str, Any],
    environ: Optional[Mapping[str, str]] = None
) -> SdkConfig:
    """
    Load SDK configuration from a dictionary.

    Args:
        data: Parsed configuration with ``signing`` and optional ``logging`` sections
        environ: Environment used for overrides; defaults to ``os.environ``

    Returns:
        SdkConfig: Loaded configuration

    Raises:
        ConfigurationError: If the configuration is invalid
    """
    environ = os.environ if environ is None else environ
    try:
        signing_data = _apply_env_overrides(data.get("signing") or {}, environ)
        signing = _parse_signing(signing_data)
        logging_config = LoggingConfig(**(data.get("logging") or {}))
    except KeyError as e:
        raise ConfigurationError(f"Missing configuration field: {e}", "INVALID_FORMAT")
    except (TypeError, ValueError, AttributeError) as e:
        raise ConfigurationError(f"Invalid configuration format: {e}", "INVALID_FORMAT")

    logger.info(f"Loaded signing configuration for key ID: {signing.key_id}")
    return SdkConfig(signing=signing, logging=logging_config)


def load_config_from_json(json_string: str, environ: Optional[Mapping[str, str]] = None) -> SdkConfig:
    """Load SDK configuration from a JSON string"""
    try:
        data = json.loads(json_string)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Failed to parse configuration JSON: {e}", "PARSE_ERROR")

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration root must be a JSON object", "INVALID_FORMAT")
    return load_config_from_dict(data, environ)


def load_config_from_file(file_path: Union[str, Path], environ: Optional[Mapping[str, str]] = None) -> SdkConfig:
    """Load SDK configuration from a JSON file"""
    try:
        with open(Path(file_path), 'r', encoding='utf-8') as f:
            json_string = f.read()
    except OSError as e:
        raise ConfigurationError(
            f"Failed to read configuration file: {e}",
            "FILE_ERROR",
            {"path": str(file_path)}
        )
    return load_config_from_json(json_string, environ)


def configure_logging(config: LoggingConfig) -> logging.Logger:
    """
    Apply logging configuration to the SDK package logger.

    A stream handler is attached once; repeated calls only update the level
    and format.
    """
    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {config.level}", "INVALID_CONFIG")

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(level)

    handler = next((h for h in package_logger.handlers if getattr(h, "_httpsig_handler", False)), None)
    if handler is None:
        handler = logging.StreamHandler()
        handler._httpsig_handler = True
        package_logger.addHandler(handler)
    handler.setFormatter(logging.Formatter(config.format))
    return package_logger
