"""
Configuration loading for blob-relay.

Configuration is resolved once at startup from an optional TOML file
(``[relay]`` table) and the process environment, with environment variables
taking precedence. The result is an immutable :class:`RelayConfig`; a missing
required value is a fatal :class:`ConfigurationMissing` error.
"""

import logging
import os
from typing import Any, Dict, Mapping, Optional

from pydantic import ValidationError

from .exceptions import ConfigurationError, ConfigurationMissing
from .models.config import RelayConfig, StorageDescriptor
from .utils.config_manager import ConfigManager
from .utils.constants import CONNECTION_STRING_KEYS

# Config section read from TOML files
CONFIG_SECTION = "relay"

# TOML key holding the storage connection string
STORAGE_KEY = "storage_connection_string"

# RelayConfig field (or STORAGE_KEY) -> environment variable
ENVIRONMENT_VARIABLES = {
    STORAGE_KEY: "BLOB_CONNECTION_STRING",
    "source_container": "SOURCE_CONTAINER_NAME",
    "archive_container": "DESTINATION_CONTAINER_NAME",
    "sftp_host": "SFTP_HOST",
    "sftp_port": "SFTP_PORT",
    "sftp_username": "SFTP_USER",
    "sftp_password": "SFTP_PASSWORD",
    "sftp_base_path": "SFTP_BASE_PATH",
    "sftp_connect_timeout": "SFTP_CONNECT_TIMEOUT",
    "sftp_known_hosts": "SFTP_KNOWN_HOSTS",
    "copy_poll_interval": "COPY_POLL_INTERVAL",
    "copy_poll_backoff": "COPY_POLL_BACKOFF",
    "copy_poll_max_interval": "COPY_POLL_MAX_INTERVAL",
    "copy_timeout": "COPY_TIMEOUT",
    "schedule_interval": "SCHEDULE_INTERVAL",
    "pipeline_name": "PIPELINE_NAME",
}

REQUIRED_SETTINGS = (
    STORAGE_KEY,
    "archive_container",
    "sftp_host",
    "sftp_username",
    "sftp_password",
)


def parse_connection_string(connection_string: str) -> StorageDescriptor:
    """
    Parse a ``Key=Value;`` storage connection string.

    Keys are case-insensitive. Recognized keys are ``EndpointUrl``, ``Region``,
    ``AccessKeyId``, ``SecretAccessKey`` and ``SessionToken``; empty segments
    are ignored.

    Args:
        connection_string: Connection string to parse

    Returns:
        StorageDescriptor built from the recognized keys

    Raises:
        ConfigurationError: If a segment is malformed or a key is unknown

    Example:
        >>> parse_connection_string("EndpointUrl=http://minio:9000;Region=us-east-1")
        StorageDescriptor(endpoint_url='http://minio:9000', region='us-east-1', ...)
    """
    values: Dict[str, str] = {}
    for segment in connection_string.split(";"):
        segment = segment.strip()
        if not segment:
            continue
        key, sep, value = segment.partition("=")
        if not sep or not key.strip():
            raise ConfigurationError("Malformed storage connection string segment, expected Key=Value")
        field = CONNECTION_STRING_KEYS.get(key.strip().lower())
        if field is None:
            raise ConfigurationError(
                f"Unknown storage connection string key '{key.strip()}'. "
                f"Valid keys are: EndpointUrl, Region, AccessKeyId, SecretAccessKey, SessionToken"
            )
        values[field] = value.strip()

    return StorageDescriptor(**values)


def _read_file_settings(config_path: Optional[str]) -> Dict[str, Any]:
    if not config_path:
        return {}
    try:
        section = ConfigManager(config_path).get_section(CONFIG_SECTION)
    except (FileNotFoundError, ValueError) as e:
        raise ConfigurationError(str(e)) from e
    unknown = sorted(set(section) - set(ENVIRONMENT_VARIABLES))
    if unknown:
        raise ConfigurationError(f"Unknown keys in [{CONFIG_SECTION}] section: {', '.join(unknown)}")
    return dict(section)


def load_config(config_path: Optional[str] = None, environ: Optional[Mapping[str, str]] = None) -> RelayConfig:
    """
    Resolve the relay configuration.

    Args:
        config_path: Optional TOML file with a ``[relay]`` table
        environ: Environment mapping (defaults to ``os.environ``)

    Returns:
        Immutable RelayConfig

    Raises:
        ConfigurationMissing: If any required value is absent
        ConfigurationError: If a value is invalid
    """
    environ = os.environ if environ is None else environ

    settings = _read_file_settings(config_path)
    for field, variable in ENVIRONMENT_VARIABLES.items():
        value = environ.get(variable)
        if value is not None and value.strip() != "":
            settings[field] = value.strip()

    missing = [
        ENVIRONMENT_VARIABLES[field]
        for field in REQUIRED_SETTINGS
        if settings.get(field) is None or str(settings[field]).strip() == ""
    ]
    if missing:
        raise ConfigurationMissing(missing)

    connection_string = str(settings.pop(STORAGE_KEY))
    try:
        config = RelayConfig(storage=parse_connection_string(connection_string), **settings)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

    logging.debug(
        "Loaded configuration (source=%s, archive=%s, sftp=%s@%s:%d%s)",
        config.source_container,
        config.archive_container,
        config.sftp_username,
        config.sftp_host,
        config.sftp_port,
        config.sftp_base_path,
    )
    return config


__all__ = [
    "ENVIRONMENT_VARIABLES",
    "REQUIRED_SETTINGS",
    "parse_connection_string",
    "load_config",
]
