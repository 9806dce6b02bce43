"""
Central constants for blob-relay.

This module consolidates all constants used throughout the codebase
to eliminate magic numbers and strings.
"""

# ============================================================================
# Classification
# ============================================================================

# Ordered (prefix, sub-path) routing table; the first matching prefix wins
CLASSIFICATION_RULES = (
    ("Invoice_", "Invoices"),
    ("Credit_", "Credits"),
    ("Stock_", "Stock"),
)

# ============================================================================
# Storage Defaults
# ============================================================================

# Container scanned when none is configured
DEFAULT_SOURCE_CONTAINER = "exportcontainer-live"

# Keys accepted in the storage connection string, mapped to descriptor fields
CONNECTION_STRING_KEYS = {
    "endpointurl": "endpoint_url",
    "region": "region",
    "accesskeyid": "access_key_id",
    "secretaccesskey": "secret_access_key",
    "sessiontoken": "session_token",
}

# Retry configuration for the storage client
STORAGE_MAX_ATTEMPTS = 3
STORAGE_RETRY_MODE = "standard"
STORAGE_CONNECT_TIMEOUT = 10.0
STORAGE_READ_TIMEOUT = 60.0

# Error codes the storage backend uses for a missing object or bucket
MISSING_OBJECT_CODES = ("404", "NoSuchKey", "NotFound")
MISSING_BUCKET_CODES = ("404", "NoSuchBucket", "NotFound")

# Error codes for credentials or permissions the backend refuses
AUTH_ERROR_CODES = ("AccessDenied", "403", "InvalidAccessKeyId", "SignatureDoesNotMatch")

# Error codes worth retrying: throttling and server-side failures
TRANSIENT_ERROR_CODES = (
    "SlowDown",
    "Throttling",
    "ThrottlingException",
    "RequestLimitExceeded",
    "RequestTimeout",
    "InternalError",
    "ServiceUnavailable",
)

# ============================================================================
# SFTP Defaults
# ============================================================================

DEFAULT_SFTP_PORT = 22

# Remote directory under which sub-path folders are created
DEFAULT_SFTP_BASE_PATH = "/Inbound/"

# Connect, banner and auth timeout (seconds)
DEFAULT_SFTP_CONNECT_TIMEOUT = 15.0

# Suffix for in-progress uploads; renamed into place once complete
PARTIAL_UPLOAD_SUFFIX = ".part"

# ============================================================================
# Copy Polling
# ============================================================================

# Interval between archive copy status checks (seconds)
DEFAULT_COPY_POLL_INTERVAL = 0.5

# Maximum time to wait for an archive copy to settle (seconds)
DEFAULT_COPY_TIMEOUT = 300.0

# ============================================================================
# Scheduling
# ============================================================================

# Seconds between passes in watch mode
DEFAULT_SCHEDULE_INTERVAL = 60.0

# Run-lock key used when none is configured
DEFAULT_PIPELINE_NAME = "blob-relay"

# ============================================================================
# Exit Codes
# ============================================================================

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_USER_INTERRUPT = 130  # User pressed Ctrl+C

# ============================================================================
# Logging and Display Constants
# ============================================================================

# Width for separator lines in console output
SEPARATOR_WIDTH = 80


__all__ = [
    # Classification
    "CLASSIFICATION_RULES",
    # Storage
    "DEFAULT_SOURCE_CONTAINER",
    "CONNECTION_STRING_KEYS",
    "STORAGE_MAX_ATTEMPTS",
    "STORAGE_RETRY_MODE",
    "STORAGE_CONNECT_TIMEOUT",
    "STORAGE_READ_TIMEOUT",
    "MISSING_OBJECT_CODES",
    "MISSING_BUCKET_CODES",
    "AUTH_ERROR_CODES",
    "TRANSIENT_ERROR_CODES",
    # SFTP
    "DEFAULT_SFTP_PORT",
    "DEFAULT_SFTP_BASE_PATH",
    "DEFAULT_SFTP_CONNECT_TIMEOUT",
    "PARTIAL_UPLOAD_SUFFIX",
    # Copy Polling
    "DEFAULT_COPY_POLL_INTERVAL",
    "DEFAULT_COPY_TIMEOUT",
    # Scheduling
    "DEFAULT_SCHEDULE_INTERVAL",
    "DEFAULT_PIPELINE_NAME",
    # Exit Codes
    "EXIT_SUCCESS",
    "EXIT_GENERAL_ERROR",
    "EXIT_USER_INTERRUPT",
    # Logging and Display
    "SEPARATOR_WIDTH",
]
