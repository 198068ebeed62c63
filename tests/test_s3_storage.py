"""
QuickNote - S3 Storage Unit Tests
===================================

What:  Tests for S3Storage with a mocked boto3 client.
How:   MagicMock stands in for the client; failures use real
       botocore ClientError shapes so error-code handling is exercised.

What we test:
    ✅ Object key layout ("<prefix>/<id>", no doubled "/", bare id for "")
    ✅ NoSuchKey / 404 read as ""
    ✅ put_object carries UTF-8 body and text/plain content type
    ✅ Other client errors surface as StorageError without leaking details
"""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from quicknote.exceptions import StorageError, ValidationError
from quicknote.storage.s3 import S3Storage


def client_error(code: str, operation: str = "GetObject") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "simulated"}}, operation)


class TestObjectKey:

    @pytest.mark.parametrize(
        "prefix, expected",
        [
            ("note", "note/AB3K9"),
            ("note/", "note/AB3K9"),
            ("a/b/", "a/b/AB3K9"),
            ("", "AB3K9"),
        ],
    )
    def test_key_layout(self, prefix, expected):
        storage = S3Storage(client=MagicMock(), bucket="bucket", prefix=prefix)
        assert storage.object_key("AB3K9") == expected

    def test_invalid_id_rejected(self):
        storage = S3Storage(client=MagicMock(), bucket="bucket")
        with pytest.raises(ValidationError):
            storage.object_key("../x")


class TestS3StorageOperations:

    def setup_method(self):
        self.client = MagicMock()
        self.storage = S3Storage(client=self.client, bucket="notes-bucket", prefix="note")

    @pytest.mark.asyncio
    async def test_read_returns_decoded_body(self):
        body = MagicMock()
        body.read.return_value = "héllo\n".encode("utf-8")
        self.client.get_object.return_value = {"Body": body}

        assert await self.storage.read("AB3K9") == "héllo\n"
        self.client.get_object.assert_called_once_with(Bucket="notes-bucket", Key="note/AB3K9")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", ["NoSuchKey", "404", "NotFound"])
    async def test_missing_key_reads_empty(self, code):
        self.client.get_object.side_effect = client_error(code)
        assert await self.storage.read("MISS1") == ""

    @pytest.mark.asyncio
    async def test_read_access_denied_raises_storage_error(self):
        self.client.get_object.side_effect = client_error("AccessDenied")
        with pytest.raises(StorageError) as exc_info:
            await self.storage.read("AB3K9")

        err = exc_info.value
        assert err.operation == "read"
        assert err.backend == "s3"
        assert err.context["error_code"] == "AccessDenied"
        assert "AccessDenied" not in err.message

    @pytest.mark.asyncio
    async def test_write_puts_object(self):
        await self.storage.write("AB3K9", "content ✎")
        self.client.put_object.assert_called_once_with(
            Bucket="notes-bucket",
            Key="note/AB3K9",
            Body="content ✎".encode("utf-8"),
            ContentType="text/plain; charset=utf-8",
        )

    @pytest.mark.asyncio
    async def test_binary_body_round_trips(self):
        raw = b"\x00\xff\xfebinary"
        body = MagicMock()
        body.read.return_value = raw
        self.client.get_object.return_value = {"Body": body}

        content = await self.storage.read("BIN1")
        await self.storage.write("BIN1", content)

        assert self.client.put_object.call_args.kwargs["Body"] == raw

    @pytest.mark.asyncio
    async def test_write_network_failure_raises_storage_error(self):
        self.client.put_object.side_effect = EndpointConnectionError(endpoint_url="https://s3.example")
        with pytest.raises(StorageError) as exc_info:
            await self.storage.write("AB3K9", "x")
        assert exc_info.value.message == "Failed to save note"
        assert exc_info.value.operation == "write"

    @pytest.mark.asyncio
    async def test_delete_calls_delete_object(self):
        await self.storage.delete("AB3K9")
        self.client.delete_object.assert_called_once_with(Bucket="notes-bucket", Key="note/AB3K9")

    @pytest.mark.asyncio
    async def test_delete_failure_raises_storage_error(self):
        self.client.delete_object.side_effect = client_error("InternalError", "DeleteObject")
        with pytest.raises(StorageError) as exc_info:
            await self.storage.delete("AB3K9")
        assert exc_info.value.operation == "delete"

    @pytest.mark.asyncio
    async def test_health_check(self):
        assert await self.storage.health_check() is True
        self.client.head_bucket.assert_called_once_with(Bucket="notes-bucket")

        self.client.head_bucket.side_effect = client_error("403", "HeadBucket")
        assert await self.storage.health_check() is False
