"""
Object source backed by an S3 bucket.

This module handles listing, downloading and deleting objects in the source
container.
"""

import io
import logging
from typing import Any, Iterator

from botocore.exceptions import BotoCoreError, ClientError

from ..exceptions import SourceUnavailable
from ..models.objects import ObjectDescriptor
from ..utils.constants import MISSING_OBJECT_CODES
from ..utils.error_handling import handle_storage_error, storage_error_code


def _strip_etag(etag: Any) -> Any:
    return etag.strip('"') if isinstance(etag, str) else etag


class S3ObjectSource:
    """
    Lists, downloads and deletes objects in a single bucket.

    Attributes:
        client: boto3 S3 client
        container: Bucket name
    """

    def __init__(self, client: Any, container: str) -> None:
        """
        Initialize the object source.

        Args:
            client: boto3 S3 client (see ``create_storage_client``)
            container: Bucket to read from
        """
        self.client = client
        self.container = container

    def list_objects(self) -> Iterator[ObjectDescriptor]:
        """
        Lazily list every object in the container.

        Pages are fetched as the iterator is consumed. Folder marker keys
        (ending in "/") are not yielded. Objects written or removed by other
        writers while listing may or may not be observed.

        Yields:
            ObjectDescriptor for each object, in listing order
        """
        paginator = self.client.get_paginator("list_objects_v2")
        page_count = 0
        for page in paginator.paginate(Bucket=self.container):
            page_count += 1
            logging.debug("Listed page %d of %s (%d keys)", page_count, self.container, page.get("KeyCount", 0))
            for item in page.get("Contents", []):
                key = item["Key"]
                if key.endswith("/"):
                    continue
                yield ObjectDescriptor(
                    name=key,
                    container=self.container,
                    size=item.get("Size", 0),
                    etag=_strip_etag(item.get("ETag")),
                )

    def download_object(self, descriptor: ObjectDescriptor) -> io.BytesIO:
        """
        Download the full payload of an object into memory.

        Args:
            descriptor: Object to download

        Returns:
            BytesIO positioned at the start of the payload

        Raises:
            SourceUnavailable: If the object no longer exists or the backend is unreachable
        """
        try:
            response = self.client.get_object(Bucket=self.container, Key=descriptor.name)
        except ClientError as e:
            code = storage_error_code(e)
            if code in MISSING_OBJECT_CODES:
                raise SourceUnavailable(f"Object {descriptor.uri} no longer exists") from e
            handle_storage_error(e, f"download of {descriptor.uri}")
            raise SourceUnavailable(f"Download of {descriptor.uri} was rejected ({code}): {e}") from e
        except BotoCoreError as e:
            handle_storage_error(e, f"download of {descriptor.uri}")
            raise SourceUnavailable(f"Storage backend unreachable: {e}") from e

        body = response["Body"]
        try:
            payload = io.BytesIO(body.read())
        except (BotoCoreError, OSError) as e:
            raise SourceUnavailable(f"Download of {descriptor.uri} was interrupted: {e}") from e
        finally:
            body.close()

        logging.debug("Downloaded %s (%d bytes)", descriptor.uri, payload.getbuffer().nbytes)
        return payload

    def delete_object_if_exists(self, descriptor: ObjectDescriptor) -> bool:
        """
        Delete an object, treating absence as a noop.

        Args:
            descriptor: Object to delete

        Returns:
            True if the object was deleted, False if it was already gone

        Raises:
            SourceUnavailable: If the backend rejects the request or is unreachable
        """
        try:
            self.client.head_object(Bucket=self.container, Key=descriptor.name)
        except ClientError as e:
            if storage_error_code(e) in MISSING_OBJECT_CODES:
                logging.info("Object %s already absent, nothing to delete", descriptor.uri)
                return False
            raise SourceUnavailable(f"Cannot check {descriptor.uri} before delete: {e}", stage="deleting") from e
        except BotoCoreError as e:
            raise SourceUnavailable(f"Storage backend unreachable: {e}", stage="deleting") from e

        try:
            self.client.delete_object(Bucket=self.container, Key=descriptor.name)
        except (ClientError, BotoCoreError) as e:
            handle_storage_error(e, f"delete of {descriptor.uri}")
            raise SourceUnavailable(f"Delete of {descriptor.uri} failed: {e}", stage="deleting") from e

        logging.info("Deleted source object %s", descriptor.uri)
        return True


__all__ = ["S3ObjectSource"]
