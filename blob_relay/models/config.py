"""Configuration models for blob-relay."""

from typing import Optional

from pydantic import ConfigDict, Field, SecretStr, field_validator

from .base import RelayBaseModel
from ..utils.constants import (
    DEFAULT_COPY_POLL_INTERVAL,
    DEFAULT_COPY_TIMEOUT,
    DEFAULT_PIPELINE_NAME,
    DEFAULT_SCHEDULE_INTERVAL,
    DEFAULT_SFTP_BASE_PATH,
    DEFAULT_SFTP_CONNECT_TIMEOUT,
    DEFAULT_SFTP_PORT,
    DEFAULT_SOURCE_CONTAINER,
)


class StorageDescriptor(RelayBaseModel):
    """
    Connection details for the object storage backend.

    Any field left unset falls back to the boto3 default resolution
    (environment, shared config files, instance role).

    Attributes:
        endpoint_url: Custom endpoint for S3-compatible services
        region: Region name
        access_key_id: Access key id
        secret_access_key: Secret access key
        session_token: Session token for temporary credentials
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    endpoint_url: Optional[str] = None
    region: Optional[str] = None
    access_key_id: Optional[str] = None
    secret_access_key: Optional[SecretStr] = None
    session_token: Optional[SecretStr] = None

    def client_kwargs(self) -> dict:
        """
        Build keyword arguments for ``boto3.client("s3", ...)``.

        Returns:
            Dictionary of client keyword arguments
        """
        kwargs: dict = {}
        if self.region:
            kwargs["region_name"] = self.region
        if self.endpoint_url:
            kwargs["endpoint_url"] = self.endpoint_url
        if self.access_key_id and self.secret_access_key:
            kwargs["aws_access_key_id"] = self.access_key_id
            kwargs["aws_secret_access_key"] = self.secret_access_key.get_secret_value()
            if self.session_token:
                kwargs["aws_session_token"] = self.session_token.get_secret_value()
        return kwargs


class RelayConfig(RelayBaseModel):
    """
    Immutable process configuration.

    Built once at startup by :func:`blob_relay.config.load_config` and passed
    explicitly to everything that needs it.

    Attributes:
        storage: Object storage connection details
        source_container: Container scanned on every pass
        archive_container: Container receiving verified copies
        sftp_host: SFTP server host
        sftp_port: SFTP server port
        sftp_username: SFTP user name
        sftp_password: SFTP password
        sftp_base_path: Remote directory under which sub-paths are created
        sftp_connect_timeout: Connect/banner/auth timeout in seconds
        sftp_known_hosts: Optional known_hosts file used to verify the server key
        copy_poll_interval: Seconds between archive copy status checks
        copy_poll_backoff: Multiplier applied to the interval after each check
        copy_poll_max_interval: Upper bound for the poll interval in seconds
        copy_timeout: Maximum seconds to wait for an archive copy to settle
        schedule_interval: Seconds between passes in watch mode
        pipeline_name: Run-lock key for overlapping passes
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    storage: StorageDescriptor = Field(default_factory=StorageDescriptor)
    source_container: str = Field(default=DEFAULT_SOURCE_CONTAINER, min_length=1)
    archive_container: str = Field(min_length=1)
    sftp_host: str = Field(min_length=1)
    sftp_port: int = Field(default=DEFAULT_SFTP_PORT, ge=1, le=65535)
    sftp_username: str = Field(min_length=1)
    sftp_password: SecretStr
    sftp_base_path: str = Field(default=DEFAULT_SFTP_BASE_PATH, min_length=1)
    sftp_connect_timeout: float = Field(default=DEFAULT_SFTP_CONNECT_TIMEOUT, gt=0)
    sftp_known_hosts: Optional[str] = None
    copy_poll_interval: float = Field(default=DEFAULT_COPY_POLL_INTERVAL, gt=0)
    copy_poll_backoff: float = Field(default=1.0, ge=1.0)
    copy_poll_max_interval: float = Field(default=DEFAULT_COPY_POLL_INTERVAL, gt=0)
    copy_timeout: float = Field(default=DEFAULT_COPY_TIMEOUT, gt=0)
    schedule_interval: float = Field(default=DEFAULT_SCHEDULE_INTERVAL, gt=0)
    pipeline_name: str = Field(default=DEFAULT_PIPELINE_NAME, min_length=1)

    @field_validator("sftp_base_path")
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        """Require an absolute remote base path."""
        if not v.startswith("/"):
            raise ValueError(f"sftp_base_path must be absolute, got: {v}")
        return v


__all__ = ["StorageDescriptor", "RelayConfig"]
