"""
SFTP transfer client.

One client is used per object transfer attempt: connect, ensure the target
directory, upload, disconnect. Uploads are written to a temporary name and
renamed into place, so a partial write never appears under the final name.
"""

from __future__ import annotations

import io
import logging
import socket
import stat
from typing import Any, Optional

import paramiko

from ..exceptions import TransferConnectFailed, TransferUploadFailed
from ..models.config import RelayConfig
from ..utils.constants import DEFAULT_SFTP_CONNECT_TIMEOUT, DEFAULT_SFTP_PORT, PARTIAL_UPLOAD_SUFFIX
from ..utils.error_handling import handle_sftp_error
from ..utils.logging_utils import format_file_size
from ..utils.path_utils import parent_directories


class SftpTransferClient:
    """
    Short-lived SFTP session wrapper for uploading relayed objects.

    Usable as a context manager: the session is opened on enter and closed
    on exit whatever the outcome.
    """

    def __init__(
        self,
        host: str,
        username: str,
        password: str,
        *,
        port: int = DEFAULT_SFTP_PORT,
        connect_timeout: float = DEFAULT_SFTP_CONNECT_TIMEOUT,
        known_hosts_path: Optional[str] = None,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self._password = password
        self.connect_timeout = connect_timeout
        self.known_hosts_path = known_hosts_path
        self._transport: paramiko.Transport | None = None
        self._client: paramiko.SFTPClient | None = None

    @classmethod
    def from_config(cls, config: RelayConfig) -> SftpTransferClient:
        """Build a client from the relay configuration."""
        return cls(
            config.sftp_host,
            config.sftp_username,
            config.sftp_password.get_secret_value(),
            port=config.sftp_port,
            connect_timeout=config.sftp_connect_timeout,
            known_hosts_path=config.sftp_known_hosts,
        )

    @property
    def is_connected(self) -> bool:
        """Check if a session is open."""
        return self._client is not None

    def _expected_host_key(self) -> Optional[paramiko.PKey]:
        if not self.known_hosts_path:
            return None
        try:
            host_keys = paramiko.HostKeys(self.known_hosts_path)
        except OSError as e:
            raise TransferConnectFailed(f"Cannot read known_hosts file {self.known_hosts_path}: {e}") from e
        entry = host_keys.lookup(self.host) or host_keys.lookup(f"[{self.host}]:{self.port}")
        if not entry:
            raise TransferConnectFailed(f"Host {self.host} not found in {self.known_hosts_path}")
        return next(iter(entry.values()))

    def connect(self) -> None:
        """
        Open the SFTP session.

        Raises:
            TransferConnectFailed: On network, host key or authentication failure
        """
        if self._client is not None:
            return

        hostkey = self._expected_host_key()
        transport: paramiko.Transport | None = None
        try:
            sock = socket.create_connection((self.host, self.port), timeout=self.connect_timeout)
            transport = paramiko.Transport(sock)
            transport.banner_timeout = self.connect_timeout
            transport.auth_timeout = self.connect_timeout
            transport.connect(hostkey=hostkey, username=self.username, password=self._password)
            client = paramiko.SFTPClient.from_transport(transport)
            if client is None:
                raise paramiko.SSHException("Server refused the SFTP subsystem")
        except (paramiko.SSHException, OSError, EOFError) as e:
            handle_sftp_error(e, f"connect to {self.host}:{self.port}")
            if transport is not None:
                transport.close()
            raise TransferConnectFailed(f"Cannot connect to {self.username}@{self.host}:{self.port}: {e}") from e

        self._transport = transport
        self._client = client
        logging.debug("Connected to SFTP server %s:%d as %s", self.host, self.port, self.username)

    def _require_client(self) -> paramiko.SFTPClient:
        if self._client is None:
            raise TransferConnectFailed(f"Not connected to {self.host}:{self.port}")
        return self._client

    def ensure_directory(self, path: str) -> None:
        """
        Create ``path`` and any missing parents.

        A directory created concurrently by another session between the check
        and the create counts as success.

        Args:
            path: Absolute remote directory

        Raises:
            TransferUploadFailed: If a directory cannot be created or a file is in the way
        """
        client = self._require_client()
        for directory in parent_directories(path):
            try:
                attrs = client.stat(directory)
            except FileNotFoundError:
                try:
                    client.mkdir(directory)
                    logging.info("Created remote directory %s", directory)
                    continue
                except OSError as e:
                    if not self._is_directory(client, directory):
                        raise TransferUploadFailed(f"Cannot create remote directory {directory}: {e}") from e
                    logging.debug("Remote directory %s was created concurrently", directory)
                    continue
            except OSError as e:
                raise TransferUploadFailed(f"Cannot inspect remote directory {directory}: {e}") from e

            if attrs.st_mode is not None and not stat.S_ISDIR(attrs.st_mode):
                raise TransferUploadFailed(f"Remote path {directory} exists and is not a directory")

    @staticmethod
    def _is_directory(client: paramiko.SFTPClient, path: str) -> bool:
        try:
            mode = client.stat(path).st_mode
        except OSError:
            return False
        return mode is not None and stat.S_ISDIR(mode)

    def upload(self, stream: io.IOBase, remote_path: str) -> int:
        """
        Upload a stream to ``remote_path``, replacing any existing file.

        The data is written to ``remote_path + ".part"``, its size confirmed,
        then renamed into place.

        Args:
            stream: Readable binary stream, read from its current position
            remote_path: Absolute remote file path

        Returns:
            Number of bytes written

        Raises:
            TransferUploadFailed: On any I/O error, size mismatch or rejection
        """
        client = self._require_client()
        partial_path = remote_path + PARTIAL_UPLOAD_SUFFIX
        try:
            attrs = client.putfo(stream, partial_path, confirm=True)
            self._replace(client, partial_path, remote_path)
        except (paramiko.SSHException, OSError, EOFError) as e:
            handle_sftp_error(e, f"upload to {remote_path}", log_traceback=False)
            self._discard_partial(client, partial_path)
            raise TransferUploadFailed(f"Upload to {remote_path} failed: {e}") from e

        size = attrs.st_size or 0
        logging.info("Uploaded %s (%s)", remote_path, format_file_size(size))
        return size

    @staticmethod
    def _replace(client: paramiko.SFTPClient, source: str, target: str) -> None:
        try:
            client.posix_rename(source, target)
            return
        except OSError as e:
            # Server without the posix-rename extension; plain rename refuses to overwrite
            logging.debug("posix_rename unavailable (%s), falling back to remove + rename", e)
        try:
            client.remove(target)
        except FileNotFoundError:
            pass
        client.rename(source, target)

    @staticmethod
    def _discard_partial(client: paramiko.SFTPClient, partial_path: str) -> None:
        try:
            client.remove(partial_path)
        except FileNotFoundError:
            return
        except (paramiko.SSHException, OSError, EOFError) as e:
            logging.warning("Could not remove partial upload %s: %s", partial_path, e)

    def disconnect(self) -> None:
        """Close the SFTP client and transport; failures are logged, never raised."""
        try:
            if self._client is not None:
                self._client.close()
        except Exception as e:  # pylint: disable=broad-except
            logging.warning("Error closing SFTP session to %s: %s", self.host, e)
        finally:
            self._client = None
        try:
            if self._transport is not None:
                self._transport.close()
        except Exception as e:  # pylint: disable=broad-except
            logging.warning("Error closing SSH transport to %s: %s", self.host, e)
        finally:
            self._transport = None

    def __enter__(self) -> SftpTransferClient:
        self.connect()
        return self

    def __exit__(self, exc_type: type[BaseException] | None, exc: BaseException | None, tb: Any) -> None:
        self.disconnect()


__all__ = ["SftpTransferClient"]
