"""
Configuration management for the HTTP Signing SDK

Loads signing and logging settings from JSON with environment overrides.
"""

from .loader import (
    SdkConfig,
    LoggingConfig,
    ENV_KEY_ID,
    ENV_KEY_FILE,
    ENV_KEY_PASSPHRASE,
    configure_logging,
    load_config_from_dict,
    load_config_from_json,
    load_config_from_file,
)

__all__ = [
    'SdkConfig',
    'LoggingConfig',
    'ENV_KEY_ID',
    'ENV_KEY_FILE',
    'ENV_KEY_PASSPHRASE',
    'configure_logging',
    'load_config_from_dict',
    'load_config_from_json',
    'load_config_from_file',
]
