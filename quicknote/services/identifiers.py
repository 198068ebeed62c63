"""
QuickNote - Note Identifier Codec
===================================

What:  Generates and validates note identifiers.

Security Model:
    The identifier is used verbatim as a filename (disk backend) and as the
    last segment of an object key (S3 backend). Restricting it to ASCII
    letters and digits is what keeps "../../etc/passwd" or "a/b" out of the
    storage layer, so every id must pass is_valid_note_id() before it reaches
    a Storage method, whether it came from the client or from the URL path.
"""

import re
import secrets

# Unambiguous alphabet: no I/O/0/1, no lowercase. Easier to read aloud and
# to type from a printed link.
NOTE_ID_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
NOTE_ID_LENGTH = 5

# re.ASCII is implied by the explicit classes; fullmatch rejects a trailing "\n"
# that "$" would otherwise accept.
_NOTE_ID_PATTERN = re.compile(r"[A-Za-z0-9]+")


def is_valid_note_id(note_id: str) -> bool:
    """
    True iff `note_id` is non-empty and consists only of [A-Za-z0-9].

    No length cap is enforced: any alphanumeric id a client picks is accepted,
    even though generated ids are always NOTE_ID_LENGTH characters.
    """
    if not note_id:
        return False
    return _NOTE_ID_PATTERN.fullmatch(note_id) is not None


def generate_note_id() -> str:
    """
    Create a random NOTE_ID_LENGTH-character id from NOTE_ID_ALPHABET.

    No existence check is made: a collision silently reuses the id of an
    earlier note (probability 1/32^5 per pair).
    """
    return "".join(secrets.choice(NOTE_ID_ALPHABET) for _ in range(NOTE_ID_LENGTH))
