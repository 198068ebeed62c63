"""
QuickNote - Disk Storage Backend
==================================

What:  Stores each note as one file in a local directory.
How:   The file name is exactly the note id; the file body holds the
       note bytes exactly as received. Async file I/O via aiofiles.
Who:   Selected by build_storage() for the HTTP server deployment.

Directory Structure:
    notes/
    ├── AB3K9
    ├── X7PQ2
    └── myOwnNoteId

Write semantics:
    Content is written to a dot-prefixed temporary file in the same directory
    and then moved over the note file with os.replace(). Readers therefore see
    either the old or the new content, never a half-written file, and
    concurrent writers to the same id end as last-replace-wins. Temporary
    names start with "." so they can never collide with a (strictly
    alphanumeric) note id.
"""

import logging
import os
import uuid
from pathlib import Path

import aiofiles
import aiofiles.os

from quicknote.exceptions import StorageError, ValidationError
from quicknote.services.identifiers import is_valid_note_id
from quicknote.storage.base import Storage, decode_content, encode_content

logger = logging.getLogger(__name__)


class DiskStorage(Storage):
    """
    Storage backend over a local directory, one file per note.

    The directory is created (with parents) on construction if missing.
    """

    name = "disk"

    def __init__(self, note_dir: str):
        """
        Args:
            note_dir: Root directory for note files. Created if it does not exist.

        Raises:
            StorageError: the directory cannot be created.
        """
        self.note_dir = Path(note_dir).resolve()
        try:
            self.note_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("Failed to create notes directory %s: %s", self.note_dir, e)
            raise StorageError(
                message="Failed to initialize note storage",
                operation="init",
                backend=self.name,
                context={"path": str(self.note_dir), "os_error": str(e)},
            ) from e
        logger.info("DiskStorage initialized at %s", self.note_dir)

    def _note_path(self, note_id: str) -> Path:
        # Callers validate first; this is the last line of defense against
        # path traversal before touching the filesystem.
        if not is_valid_note_id(note_id):
            raise ValidationError(message="Invalid note ID format", field="noteId")
        return self.note_dir / note_id

    async def read(self, note_id: str) -> str:
        path = self._note_path(note_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                data = await f.read()
        except FileNotFoundError:
            logger.info("Note %s does not exist at %s", note_id, path)
            return ""
        except OSError as e:
            logger.error("Failed to read note %s from %s: %s", note_id, path, e)
            raise StorageError(
                message="Failed to read note",
                operation="read",
                note_id=note_id,
                backend=self.name,
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Note %s read from %s (%d bytes)", note_id, path, len(data))
        return decode_content(data)

    async def write(self, note_id: str, content: str) -> None:
        path = self._note_path(note_id)
        tmp_path = self.note_dir / f".{note_id}.{uuid.uuid4().hex}.tmp"
        data = encode_content(content)

        try:
            async with aiofiles.open(tmp_path, "wb") as f:
                await f.write(data)
            await aiofiles.os.replace(tmp_path, path)
        except OSError as e:
            logger.error(
                "Failed to write note %s to %s: %s (check permissions and free space in %s)",
                note_id,
                path,
                e,
                self.note_dir,
            )
            await self._discard(tmp_path)
            raise StorageError(
                message="Failed to save note",
                operation="write",
                note_id=note_id,
                backend=self.name,
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Note %s written to %s (%d bytes)", note_id, path, len(data))

    async def delete(self, note_id: str) -> None:
        path = self._note_path(note_id)
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            logger.info("Note %s does not exist at %s, nothing to delete", note_id, path)
            return
        except OSError as e:
            logger.error("Failed to delete note %s from %s: %s", note_id, path, e)
            raise StorageError(
                message="Failed to delete note",
                operation="delete",
                note_id=note_id,
                backend=self.name,
                context={"path": str(path), "os_error": str(e)},
            ) from e

        logger.debug("Note %s deleted from %s", note_id, path)

    async def health_check(self) -> bool:
        return self.note_dir.is_dir() and os.access(self.note_dir, os.W_OK | os.X_OK)

    async def _discard(self, tmp_path: Path) -> None:
        """Best-effort removal of a leftover temporary file after a failed write."""
        try:
            await aiofiles.os.remove(tmp_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Failed to clean up temporary file %s: %s", tmp_path.name, e)
