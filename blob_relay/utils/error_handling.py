"""
Error handling utilities for standardized error logging and handling.

This module provides reusable error handling patterns for storage, SFTP
and per-object pipeline failures.
"""

import logging
import sys
import traceback
from typing import NoReturn, Optional

import paramiko
from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import ObjectProcessingError
from .constants import AUTH_ERROR_CODES, MISSING_BUCKET_CODES, MISSING_OBJECT_CODES, TRANSIENT_ERROR_CODES


def storage_error_code(error: Exception) -> Optional[str]:
    """
    Extract the backend error code from a storage client error.

    Args:
        error: Exception raised by the boto3 client

    Returns:
        Error code (e.g. "NoSuchKey", "404"), or None when not a ClientError
    """
    if isinstance(error, ClientError):
        return str(error.response.get("Error", {}).get("Code", "")) or None
    return None


def is_transient_storage_error(error: Exception) -> bool:
    """
    Tell whether a storage error may clear up if the call is retried.

    Connection-level botocore errors, throttling codes and 5xx responses are
    transient. Anything else (permissions, bad credentials, malformed
    requests) is not.
    """
    if isinstance(error, BotoCoreError):
        return True
    if not isinstance(error, ClientError):
        return False
    if storage_error_code(error) in TRANSIENT_ERROR_CODES:
        return True
    status = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")
    return isinstance(status, int) and status >= 500


def handle_storage_error(error: Exception, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle object storage errors with standardized logging.

    Args:
        error: The boto3/botocore error to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback
    """
    code = storage_error_code(error)

    if code in AUTH_ERROR_CODES:
        logging.error(
            "Authentication failed during %s: %s. Please check the storage connection string.",
            operation,
            error,
        )
    elif code in MISSING_OBJECT_CODES + MISSING_BUCKET_CODES:
        logging.error("Resource not found during %s: %s", operation, error)
    elif isinstance(error, BotoCoreError):
        logging.error("Storage backend unreachable during %s: %s", operation, error)
    else:
        logging.error("Storage error during %s: %s", operation, error)

    if log_traceback:
        logging.debug("Traceback: %s", traceback.format_exc())


def handle_sftp_error(error: Exception, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle SFTP/SSH errors with standardized logging.

    Args:
        error: The paramiko or socket error to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback
    """
    if isinstance(error, paramiko.AuthenticationException):
        logging.error(
            "Authentication failed during %s: Invalid credentials. Please check SFTP_USER and SFTP_PASSWORD.",
            operation,
        )
    elif isinstance(error, paramiko.SSHException):
        logging.error("SSH error during %s: %s", operation, error)
    else:
        logging.error("SFTP error during %s: %s", operation, error)

    if log_traceback:
        logging.debug("Traceback: %s", traceback.format_exc())


def handle_generic_error(error: Exception, operation: str, *, log_traceback: bool = True) -> None:
    """
    Handle generic errors with standardized logging.

    Args:
        error: The exception to handle
        operation: Description of the operation that failed
        log_traceback: Whether to log the full traceback
    """
    logging.error("Unexpected error during %s: %s", operation, error)

    if log_traceback:
        logging.error("Traceback: %s", traceback.format_exc())


def log_object_failure(object_name: str, stage: str, error: BaseException) -> None:
    """
    Log a per-object failure with full diagnostic context.

    Records the error kind, message and originating stage at ERROR level and
    the traceback of ``error`` at DEBUG level.

    Args:
        object_name: Name of the object that failed
        stage: Pipeline stage where the failure happened
        error: The exception raised
    """
    kind = error.kind if isinstance(error, ObjectProcessingError) else type(error).__name__
    message = error.message if isinstance(error, ObjectProcessingError) else str(error)
    logging.error("Failed to process object %s during %s: %s: %s", object_name, stage, kind, message)
    logging.debug(
        "Traceback for %s: %s",
        object_name,
        "".join(traceback.format_exception(type(error), error, error.__traceback__)),
    )


def log_and_exit(message: str, exit_code: int = 1) -> NoReturn:
    """
    Log an error message and exit the program.

    Args:
        message: Error message to log
        exit_code: Exit code (default: 1)
    """
    logging.error(message)
    sys.exit(exit_code)


__all__ = [
    "storage_error_code",
    "is_transient_storage_error",
    "handle_storage_error",
    "handle_sftp_error",
    "handle_generic_error",
    "log_object_failure",
    "log_and_exit",
]
