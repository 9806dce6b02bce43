"""
Service layer for blob-relay.

This package provides the high-level orchestration that ties the object
source, the SFTP destination and the archive container together.
"""

from .relay_service import RelayService, get_run_lock

__all__ = ["RelayService", "get_run_lock"]
