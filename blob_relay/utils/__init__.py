"""
Utility modules for blob-relay operations.
"""

from .logger import setup_logging, WrappingFormatter
from .session import create_storage_client
from .path_utils import build_remote_directory, build_remote_path, is_direct_child, object_base_name

from . import error_handling
from . import logging_utils
from . import constants
from . import path_utils
from . import config_manager

__all__ = [
    "setup_logging",
    "WrappingFormatter",
    "create_storage_client",
    "build_remote_directory",
    "build_remote_path",
    "is_direct_child",
    "object_base_name",
    "error_handling",
    "logging_utils",
    "constants",
    "path_utils",
    "config_manager",
]
