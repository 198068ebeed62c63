"""
QuickNote - Note Service (Read/Write Pipeline)
================================================

What:  The two note operations: read a note, and write-or-delete a note.
How:   Validates the id, then performs exactly one storage call. Knows
       nothing about HTTP, content types or reply encodings.
Who:   Constructed per request by the routes from the injected Storage.

Write Flow:
    ┌────────────┐    ┌──────────────┐    ┌──────────────┐    ┌────────────────┐
    │ trim id    │───▶│ empty?       │───▶│ validate id  │───▶│ blank content? │
    │            │    │ → generate   │    │ ✗ → 400      │    │ ✓ delete       │
    └────────────┘    └──────────────┘    └──────────────┘    │ ✗ write        │
                                                              └────────────────┘

    No retries: a failed storage call surfaces as StorageError (500).
"""

import logging
from dataclasses import dataclass

from quicknote.exceptions import StorageError, ValidationError
from quicknote.services.identifiers import generate_note_id, is_valid_note_id
from quicknote.storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOutcome:
    """Result of write_note(): the final id and whether the note was deleted."""

    note_id: str
    deleted: bool


class NoteService:
    """
    Business logic for note operations over a Storage backend.

    Stateless apart from the backend reference; safe to create per request.
    """

    def __init__(self, storage: Storage):
        self.storage = storage

    async def read_note(self, note_id: str) -> str:
        """
        Return the content of `note_id`.

        An empty id means "new note" and returns "" without touching storage.
        Unknown ids also return "" (see Storage.read).

        Raises:
            ValidationError: the id is not strictly alphanumeric
            StorageError:    the backend failed
        """
        if not note_id:
            return ""
        if not is_valid_note_id(note_id):
            logger.info("Rejected read for invalid note ID %r", note_id)
            raise ValidationError(message="Invalid note ID format", field="noteId")

        try:
            content = await self.storage.read(note_id)
        except StorageError:
            logger.error("Failed to read note %s (backend=%s)", note_id, self.storage.name)
            raise

        logger.info("Note %s retrieved (%d chars)", note_id, len(content))
        return content

    async def write_note(self, note_id: str, content: str) -> WriteOutcome:
        """
        Create, overwrite or delete a note.

        Steps:
            1. Trim the id; generate a fresh one when empty
            2. Validate the id (no storage call on failure)
            3. Whitespace-only content deletes the note, anything else is
               stored verbatim (untrimmed)

        Returns:
            WriteOutcome with the id actually used

        Raises:
            ValidationError: "Invalid note ID format"
            StorageError:    "Failed to delete note" / "Failed to save note"
        """
        note_id = note_id.strip()
        if not note_id:
            note_id = generate_note_id()
            logger.info("Generated new note ID: %s", note_id)

        if not is_valid_note_id(note_id):
            logger.info("Rejected write for invalid note ID %r", note_id)
            raise ValidationError(message="Invalid note ID format", field="noteId")

        if not content.strip():
            try:
                await self.storage.delete(note_id)
            except StorageError as e:
                logger.error("Failed to delete note %s (backend=%s)", note_id, self.storage.name)
                raise StorageError(
                    message="Failed to delete note",
                    operation="delete",
                    note_id=note_id,
                    backend=self.storage.name,
                    context=e.context,
                ) from e
            logger.info("Note %s deleted", note_id)
            return WriteOutcome(note_id=note_id, deleted=True)

        try:
            await self.storage.write(note_id, content)
        except StorageError as e:
            logger.error("Failed to save note %s (backend=%s)", note_id, self.storage.name)
            raise StorageError(
                message="Failed to save note",
                operation="write",
                note_id=note_id,
                backend=self.storage.name,
                context=e.context,
            ) from e

        logger.info("Note %s saved (%d chars)", note_id, len(content))
        return WriteOutcome(note_id=note_id, deleted=False)
