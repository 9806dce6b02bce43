"""
Backend clients for blob-relay.

This package contains the adapters for the object storage backend and the
SFTP transfer destination.
"""

from .archive_mover import S3ArchiveMover
from .object_source import S3ObjectSource
from .sftp_client import SftpTransferClient

__all__ = ["S3ArchiveMover", "S3ObjectSource", "SftpTransferClient"]
