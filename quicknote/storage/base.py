"""
QuickNote - Abstract Storage Contract
=======================================

What:  Abstract base class defining the key/value contract every note
       storage backend implements.
How:   Concrete backends (DiskStorage, S3Storage) inherit from Storage and
       implement read/write/delete. The backend is chosen once at startup
       (see storage.build_storage) and injected into the app; request
       handling never depends on which one is in use.

Shared semantics (every backend MUST behave identically):

    read(id)            → stored content; "" if the key does not exist
    write(id, c)        → create or fully overwrite; read(id) == c afterwards
    delete(id)          → remove; deleting a missing key is NOT an error
    delete(id); read(id) == ""   (same as never written)

    Errors are restricted to real I/O failures (permissions, network,
    service faults) and are always raised as StorageError. "Not found" is
    never an error, which means an unknown id and an empty note look the
    same to callers.

Concurrency:
    Backends hold no in-process locks. Calls for different ids are
    independent; concurrent writes to the same id are last-write-wins, with
    whatever ordering the filesystem or object store provides.
"""

from abc import ABC, abstractmethod

# Bytes that are not valid UTF-8 travel through str as lone surrogates
# (U+DC80..U+DCFF) and are restored exactly on the way out.
CONTENT_ENCODING = "utf-8"
CONTENT_ERRORS = "surrogateescape"


def decode_content(data: bytes) -> str:
    """Raw note bytes to str, losslessly."""
    return data.decode(CONTENT_ENCODING, errors=CONTENT_ERRORS)


def encode_content(content: str) -> bytes:
    """Inverse of decode_content(): the exact bytes that were stored."""
    return content.encode(CONTENT_ENCODING, errors=CONTENT_ERRORS)


def display_content(content: str) -> str:
    """
    Content safe to embed in HTML or JSON.

    Invalid byte sequences show as U+FFFD. Only for rendering, never stored.
    """
    return encode_content(content).decode(CONTENT_ENCODING, errors="replace")


class Storage(ABC):
    """
    Abstract interface for note persistence.

    Contract:
        - note ids passed in have already been validated by the identifier
          codec (alphanumeric only)
        - content is text; backends store it with encode_content() and
          return it with decode_content(), so arbitrary bytes survive
          unchanged
        - implementation-specific errors are wrapped in StorageError

    Implementations:
        - DiskStorage: one file per note in a local directory
        - S3Storage:   one object per note under a key prefix in a bucket
    """

    # Backend name used in logs, error context and the health endpoint
    name: str = "abstract"

    @abstractmethod
    async def read(self, note_id: str) -> str:
        """
        Return the content stored for `note_id`.

        Returns:
            The note content, or "" when no note exists for `note_id`.

        Raises:
            StorageError: the backend could not be read (never for a miss).
        """
        ...

    @abstractmethod
    async def write(self, note_id: str, content: str) -> None:
        """
        Create the note or replace its content entirely (no merge).

        Raises:
            StorageError: the content could not be persisted.
        """
        ...

    @abstractmethod
    async def delete(self, note_id: str) -> None:
        """
        Remove the note. Idempotent: a missing note is silently ignored.

        Raises:
            StorageError: the backend refused or failed the removal.
        """
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check that the backend is reachable and usable.

        What:    Lightweight probe (no note is read or written).
        Who:     Called by the /health endpoint.
        Returns: True if the backend looks operational, False otherwise.
        """
        ...
