"""
Protocols and abstract base classes for type safety.

This package provides protocols that define interfaces for the storage and
transfer components, enabling better type checking and abstraction.
"""

from .storage_protocol import ArchiveMoverProtocol, ObjectSourceProtocol, TransferClientProtocol

__all__ = ["ObjectSourceProtocol", "ArchiveMoverProtocol", "TransferClientProtocol"]
