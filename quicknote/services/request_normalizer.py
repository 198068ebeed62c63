"""
QuickNote - Request Normalizer
================================

What:  Maps every way a client can address and send a note onto one canonical
       (note_id, content) pair, and decides how the reply is encoded.
How:   Pure functions over primitives: a case-insensitive header mapping
       (starlette Headers), a query mapping, the URL path and the raw body.
       Nothing here touches storage or depends on whether the request came
       from uvicorn or from an API Gateway event.
Who:   Called by routes/notes.py and the request logging middleware.

Where a note id can come from:
    GET   ?note=<id>           then  .../noteid/<id>
    POST  JSON         body "noteId"     then  .../noteid/<id>
          form / raw   ?noteId=<id>       then  form "noteId"
                                         then  .../noteid/<id>

Where content comes from (POST):
    application/json                   → {"noteId": ..., "content": ...}
    application/x-www-form-urlencoded  → "text" field, if "text" or "noteId" present
                                         else the whole raw body
    anything else                      → the whole raw body

None of the "who is calling" checks below are access control: they only pick
the response encoding.
"""

import enum
import logging
from typing import Mapping, Optional
from urllib.parse import parse_qsl

from pydantic import ValidationError as PydanticValidationError

from quicknote.exceptions import ValidationError
from quicknote.schemas.note import NoteRequest
from quicknote.storage.base import CONTENT_ERRORS, decode_content

logger = logging.getLogger(__name__)

NOTE_PATH_MARKER = "/noteid/"

JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class ReplyFormat(str, enum.Enum):
    """How a response body is encoded for the caller."""

    PLAIN = "plain"  # terminal client: raw content / share URL
    FORM = "form"    # form post: "OK: <id>"
    JSON = "json"
    HTML = "html"    # interactive page


# ── Note id extraction ────────────────────────────────────────────────────


def extract_path_note_id(path: str) -> str:
    """
    Return the text after the first "/noteid/" in `path`, trimmed of "/".

    "/noteid/AB3K9"          → "AB3K9"
    "/app/noteid/AB3K9/"     → "AB3K9"
    "/"                      → ""

    The result is NOT validated here.
    """
    idx = path.find(NOTE_PATH_MARKER)
    if idx == -1:
        return ""
    return path[idx + len(NOTE_PATH_MARKER):].strip("/")


def extract_read_note_id(query: Mapping[str, str], path: str) -> str:
    """The id a read addresses: `?note=` query parameter, else the path id."""
    note_id = query.get("note") or ""
    if note_id:
        return note_id
    return extract_path_note_id(path)


# ── Body parsing ──────────────────────────────────────────────────────────


def _is_json(content_type: str) -> bool:
    return JSON_CONTENT_TYPE in (content_type or "").lower()


def _is_form(content_type: str) -> bool:
    return FORM_CONTENT_TYPE in (content_type or "").lower()


def _parse_body(content_type: str, body: bytes) -> NoteRequest:
    """Decode the body alone into a NoteRequest (id may be "")."""
    if _is_json(content_type):
        try:
            return NoteRequest.model_validate_json(body)
        except PydanticValidationError as e:
            logger.info("Rejected JSON body (%d bytes): %d validation error(s)", len(body), e.error_count())
            raise ValidationError(message="invalid JSON format", field="body") from e

    # Escaped raw bytes do not survive str validation: build models unvalidated
    text = decode_content(body)

    if _is_form(content_type):
        fields = {}
        for key, value in parse_qsl(text, keep_blank_values=True, errors=CONTENT_ERRORS):
            # First occurrence wins for repeated keys
            fields.setdefault(key, value)
        if "text" in fields or "noteId" in fields:
            return NoteRequest.model_construct(note_id=fields.get("noteId", ""), content=fields.get("text", ""))
        logger.debug("Form body without text/noteId fields, storing raw body (%d bytes)", len(body))

    return NoteRequest.model_construct(note_id="", content=text)


def parse_note_request(
    content_type: str,
    body: bytes,
    query: Mapping[str, str],
    path: str,
) -> NoteRequest:
    """
    Normalize a write request into NoteRequest(note_id, content).

    The returned id is untrimmed and unvalidated; NoteService does both (and
    generates an id when it is empty).

    Args:
        content_type: Request Content-Type header value ("" if absent)
        body:         Raw request body
        query:        Query parameters
        path:         URL path

    Raises:
        ValidationError: JSON content type with an undecodable body or
                         non-string fields ("invalid JSON format")
    """
    parsed = _parse_body(content_type, body)

    # The ?noteId= override belongs to form and raw posts; a JSON body names
    # its own id.
    query_id = "" if _is_json(content_type) else query.get("noteId") or ""
    note_id = query_id or parsed.note_id or extract_path_note_id(path)
    return NoteRequest.model_construct(note_id=note_id, content=parsed.content)


# ── Caller type / reply encoding ──────────────────────────────────────────


def is_terminal_client(headers: Mapping[str, str]) -> bool:
    """True when the User-Agent mentions curl (case-insensitive)."""
    return "curl" in (headers.get("user-agent") or "").lower()


def read_reply_format(headers: Mapping[str, str], note_id: str) -> ReplyFormat:
    """
    Encoding for a read reply.

    Terminal clients asking for a concrete note get the raw content; without
    an id they get the page like everyone else. Programmatic callers that
    accept JSON but not HTML get the content as JSON.
    """
    if note_id and is_terminal_client(headers):
        return ReplyFormat.PLAIN
    accept = (headers.get("accept") or "").lower()
    if JSON_CONTENT_TYPE in accept and "text/html" not in accept:
        return ReplyFormat.JSON
    return ReplyFormat.HTML


def write_reply_format(headers: Mapping[str, str], content_type: str) -> ReplyFormat:
    """Encoding for a write reply: share URL, "OK: <id>" or JSON."""
    if is_terminal_client(headers):
        return ReplyFormat.PLAIN
    if _is_form(content_type):
        return ReplyFormat.FORM
    return ReplyFormat.JSON


# ── Client address / URLs ─────────────────────────────────────────────────


def _strip_address(value: str) -> str:
    """Drop quotes, IPv6 brackets and a trailing port from an address token."""
    value = value.strip().strip('"')
    if value.startswith("["):
        end = value.find("]")
        if end != -1:
            return value[1:end]
        return value[1:]
    # A single colon means host:port; more than one is a bare IPv6 address
    if value.count(":") == 1:
        return value.split(":", 1)[0]
    return value


def client_ip(headers: Mapping[str, str], peer: Optional[str]) -> str:
    """
    Best-effort originating client address, for logging only.

    Preference: Forwarded "for=", first X-Forwarded-For entry, X-Real-IP,
    then the transport peer address.
    """
    forwarded = headers.get("forwarded") or ""
    if forwarded:
        # Forwarded: for=203.0.113.60;proto=https, for="[2001:db8::1]:4711"
        for part in forwarded.replace(",", ";").split(";"):
            part = part.strip()
            if part.lower().startswith("for="):
                return _strip_address(part[4:])

    xff = headers.get("x-forwarded-for") or ""
    if xff.strip():
        return _strip_address(xff.split(",")[0])

    real_ip = (headers.get("x-real-ip") or "").strip()
    if real_ip:
        return _strip_address(real_ip)

    return _strip_address(peer or "")


def app_root(path: str) -> str:
    """The request path up to the "/noteid/" marker, always ending in "/"."""
    idx = path.find(NOTE_PATH_MARKER)
    if idx != -1:
        path = path[:idx]
    if not path.endswith("/"):
        path += "/"
    return path


def share_url(
    headers: Mapping[str, str],
    scheme: str,
    host: str,
    path: str,
    note_id: str,
    public_url: str = "",
) -> str:
    """
    Absolute URL of a note, handed to terminal clients after a write.

    A configured public URL wins. Otherwise the base is rebuilt from the
    request, honouring X-Forwarded-Proto / X-Forwarded-Host and keeping any
    reverse-proxy subpath in front of "/noteid/".
    """
    if public_url:
        base = public_url if public_url.endswith("/") else public_url + "/"
    else:
        if (headers.get("x-forwarded-proto") or "").lower() == "https":
            scheme = "https"
        host = headers.get("x-forwarded-host") or host
        base = f"{scheme}://{host}{app_root(path)}"
    return f"{base}noteid/{note_id}"
