"""
Session utilities for object storage operations.

This module provides a factory for boto3 S3 clients configured with a retry
strategy and connection timeouts.
"""

import logging
from typing import TYPE_CHECKING, Any

import boto3
from botocore.config import Config

from .constants import (
    STORAGE_CONNECT_TIMEOUT,
    STORAGE_MAX_ATTEMPTS,
    STORAGE_READ_TIMEOUT,
    STORAGE_RETRY_MODE,
)

if TYPE_CHECKING:
    from ..models.config import StorageDescriptor


def create_storage_client(
    descriptor: "StorageDescriptor",
    *,
    max_attempts: int = STORAGE_MAX_ATTEMPTS,
    connect_timeout: float = STORAGE_CONNECT_TIMEOUT,
    read_timeout: float = STORAGE_READ_TIMEOUT,
) -> Any:
    """
    Create a boto3 S3 client with retry strategy.

    Args:
        descriptor: Storage connection details
        max_attempts: Total attempts per request, including the first one
        connect_timeout: Connection timeout in seconds
        read_timeout: Read timeout in seconds

    Returns:
        Configured ``boto3.client("s3")`` with:
        - Standard-mode retries with exponential backoff
        - Connect and read timeouts
        - Explicit endpoint, region and credentials when the descriptor has them

    Example:
        >>> client = create_storage_client(StorageDescriptor(region="eu-west-1"))
        >>> client.list_objects_v2(Bucket="exportcontainer-live")
    """
    client_config = Config(
        retries={"max_attempts": max_attempts, "mode": STORAGE_RETRY_MODE},
        connect_timeout=connect_timeout,
        read_timeout=read_timeout,
    )
    kwargs = descriptor.client_kwargs()
    logging.debug(
        "Creating storage client (endpoint=%s, region=%s, explicit credentials=%s)",
        kwargs.get("endpoint_url", "default"),
        kwargs.get("region_name", "default"),
        "aws_access_key_id" in kwargs,
    )
    return boto3.client("s3", config=client_config, **kwargs)


__all__ = ["create_storage_client"]
