"""
Pydantic models for blob-relay.

This package contains all models used by the relay:
- objects: source object references and per-pass transfer tasks
- copy: archive copy operations
- results: stage, object and pass results
- config: immutable process configuration
"""

from .base import RelayBaseModel
from .objects import ObjectDescriptor, PipelineStage, TaskOutcome, TransferTask
from .copy import CopyOperation, CopyStatus
from .results import ObjectResult, PassSummary, StageResult
from .config import RelayConfig, StorageDescriptor

__all__ = [
    "RelayBaseModel",
    "ObjectDescriptor",
    "PipelineStage",
    "TaskOutcome",
    "TransferTask",
    "CopyOperation",
    "CopyStatus",
    "ObjectResult",
    "PassSummary",
    "StageResult",
    "RelayConfig",
    "StorageDescriptor",
]
