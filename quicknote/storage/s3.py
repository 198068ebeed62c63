"""
QuickNote - S3 Storage Backend
================================

What:  Stores each note as one object in an S3 bucket (or any S3-compatible
       object store).
How:   Object key is "<prefix>/<note id>" with surplus trailing slashes
       trimmed from the prefix. The body is the note bytes exactly as received,
       with Content-Type "text/plain; charset=utf-8".
Who:   Selected by build_storage() for the AWS Lambda deployment.

boto3 is synchronous, so every client call is pushed to a worker thread with
asyncio.to_thread() to keep the event loop free. The client itself is
injected, which lets tests pass a MagicMock.
"""

import asyncio
import logging

from botocore.exceptions import BotoCoreError, ClientError

from quicknote.exceptions import StorageError, ValidationError
from quicknote.services.identifiers import is_valid_note_id
from quicknote.storage.base import Storage, decode_content, encode_content

logger = logging.getLogger(__name__)

# Error codes that mean "no such object": GetObject reports NoSuchKey, while
# HeadObject-style and some S3-compatible stores report a bare 404.
_MISSING_KEY_CODES = frozenset({"NoSuchKey", "404", "NotFound"})

CONTENT_TYPE = "text/plain; charset=utf-8"


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


class S3Storage(Storage):
    """Storage backend over an S3 bucket, one object per note."""

    name = "s3"

    def __init__(self, client, bucket: str, prefix: str = "note"):
        """
        Args:
            client: A boto3 S3 client (or anything with the same methods).
            bucket: Bucket holding the notes.
            prefix: Key prefix; "note" gives keys like "note/AB3K9".
        """
        self.client = client
        self.bucket = bucket
        self.prefix = prefix.rstrip("/")
        logger.info("S3Storage initialized for bucket=%s prefix=%s", bucket, self.prefix or "(none)")

    def object_key(self, note_id: str) -> str:
        """Object key for `note_id`. An empty prefix yields the bare id."""
        if not is_valid_note_id(note_id):
            raise ValidationError(message="Invalid note ID format", field="noteId")
        if not self.prefix:
            return note_id
        return f"{self.prefix}/{note_id}"

    def _storage_error(self, message: str, operation: str, note_id: str, key: str, error: Exception) -> StorageError:
        code = _error_code(error) if isinstance(error, ClientError) else type(error).__name__
        logger.error(
            "S3 %s failed for note %s (bucket=%s key=%s code=%s): %s",
            operation,
            note_id,
            self.bucket,
            key,
            code,
            error,
        )
        return StorageError(
            message=message,
            operation=operation,
            note_id=note_id,
            backend=self.name,
            context={"bucket": self.bucket, "key": key, "error_code": code},
        )

    async def read(self, note_id: str) -> str:
        key = self.object_key(note_id)
        try:
            response = await asyncio.to_thread(self.client.get_object, Bucket=self.bucket, Key=key)
            data = await asyncio.to_thread(response["Body"].read)
        except ClientError as e:
            if _error_code(e) in _MISSING_KEY_CODES:
                logger.info("Note %s does not exist at s3://%s/%s", note_id, self.bucket, key)
                return ""
            raise self._storage_error("Failed to read note", "read", note_id, key, e) from e
        except BotoCoreError as e:
            raise self._storage_error("Failed to read note", "read", note_id, key, e) from e

        logger.debug("Note %s read from s3://%s/%s (%d bytes)", note_id, self.bucket, key, len(data))
        return decode_content(data)

    async def write(self, note_id: str, content: str) -> None:
        key = self.object_key(note_id)
        data = encode_content(content)
        try:
            await asyncio.to_thread(
                self.client.put_object,
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=CONTENT_TYPE,
            )
        except (BotoCoreError, ClientError) as e:
            raise self._storage_error("Failed to save note", "write", note_id, key, e) from e

        logger.debug("Note %s written to s3://%s/%s (%d bytes)", note_id, self.bucket, key, len(data))

    async def delete(self, note_id: str) -> None:
        # DeleteObject succeeds for missing keys, so idempotence comes for free
        key = self.object_key(note_id)
        try:
            await asyncio.to_thread(self.client.delete_object, Bucket=self.bucket, Key=key)
        except (BotoCoreError, ClientError) as e:
            raise self._storage_error("Failed to delete note", "delete", note_id, key, e) from e

        logger.debug("Note %s deleted from s3://%s/%s", note_id, self.bucket, key)

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(self.client.head_bucket, Bucket=self.bucket)
            return True
        except (BotoCoreError, ClientError) as e:
            logger.warning("S3 health check failed for bucket %s: %s", self.bucket, e)
            return False
