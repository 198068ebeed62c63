"""
QuickNote - Storage Layer
===========================

What:  Note persistence behind one small async key/value contract.
How:   build_storage() turns Settings into the configured backend. The
       result is created once per process and injected into the app.
"""

import logging

import boto3

from quicknote.config import Settings
from quicknote.storage.base import Storage
from quicknote.storage.disk import DiskStorage
from quicknote.storage.s3 import S3Storage

logger = logging.getLogger(__name__)

__all__ = ["Storage", "DiskStorage", "S3Storage", "build_storage"]


def build_storage(settings: Settings) -> Storage:
    """
    Create the storage backend selected by `settings`.

    "auto" resolves to S3 inside AWS Lambda and to the disk everywhere else.

    Raises:
        ValueError: required settings for the selected backend are missing.
    """
    settings.validate_required()
    backend = settings.resolved_backend

    if backend == "s3":
        client = boto3.client(
            "s3",
            region_name=settings.s3_region or None,
            endpoint_url=settings.s3_endpoint_url or None,
        )
        logger.info("Using S3 storage backend (bucket=%s)", settings.s3_bucket)
        return S3Storage(client=client, bucket=settings.s3_bucket, prefix=settings.s3_prefix)

    logger.info("Using disk storage backend (dir=%s)", settings.note_dir)
    return DiskStorage(note_dir=settings.note_dir)
