"""
Blob Relay - Relay classified objects from object storage to an SFTP server.

Objects in a source container are classified by filename prefix, uploaded to
an SFTP server, copied to an archive container and removed from the source
once the archive copy is verified.
"""

from ._version import __version__

# Import main classes and functions for easy access
from .classifier import classify
from .config import load_config
from .api import S3ArchiveMover, S3ObjectSource, SftpTransferClient
from .models import PassSummary, RelayConfig
from .services import RelayService
from .utils import setup_logging, WrappingFormatter
from .cli import main as cli_main, cli as cli_group

__all__ = [
    "__version__",
    "classify",
    "load_config",
    "S3ArchiveMover",
    "S3ObjectSource",
    "SftpTransferClient",
    "PassSummary",
    "RelayConfig",
    "RelayService",
    "setup_logging",
    "WrappingFormatter",
    "cli_main",
    "cli_group",
]
