"""
QuickNote - Note Route Handlers
=================================

What:  The whole public HTTP surface apart from /health.
How:   A catch-all route dispatches by method, so the app works unchanged
       under any path prefix a reverse proxy or API Gateway stage adds.
       Routes stay thin: the normalizer turns the request into
       (note_id, content), NoteService does the work, and the reply is
       encoded for the kind of caller.
Who:   Browsers (HTML page + JSON auto-save), terminal clients (curl),
       HTML forms and scripts.

Routes:
    GET|HEAD  /favicon.ico          embedded icon; other methods → 405
    GET       /{path}               read  (?note=<id> or .../noteid/<id>)
    POST      /{path}               write (see request_normalizer)
    OPTIONS   /{path}               CORS preflight: 200, empty body
    *         /{path}               405

Read replies:
    terminal client + id   → raw content (text/plain), 404 if empty
    Accept: JSON, not HTML → {"success": true, "noteId": ..., "content": ...}
    everyone else          → interactive HTML page

Write replies:
    terminal client        → "<share URL>\\n"
    form post              → "OK: <id>\\n"
    everyone else          → {"success": true, "noteId": "<id>"}
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response

from quicknote.assets import FAVICON_CONTENT_TYPE, FAVICON_ICO
from quicknote.config import settings
from quicknote.exceptions import MethodNotAllowedError, NotFoundError
from quicknote.rendering import render_note_page
from quicknote.schemas.note import NoteContentResponse, NoteResponse
from quicknote.services.note_service import NoteService
from quicknote.services.request_normalizer import (
    ReplyFormat,
    extract_read_note_id,
    parse_note_request,
    read_reply_format,
    share_url,
    write_reply_format,
)
from quicknote.storage.base import Storage, display_content, encode_content

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Notes"])

PLAIN_CONTENT_TYPE = "text/plain; charset=utf-8"

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


# ── Dependencies ──────────────────────────────────────────────────────────


def get_storage(request: Request) -> Storage:
    """The backend chosen at startup (see main.create_app)."""
    return request.app.state.storage


def get_note_service(storage: Storage = Depends(get_storage)) -> NoteService:
    return NoteService(storage)


# ── Routes ────────────────────────────────────────────────────────────────
# Registration order matters: the favicon route must precede the catch-all.


@router.api_route("/favicon.ico", methods=ALL_METHODS, include_in_schema=False)
async def favicon(request: Request) -> Response:
    if request.method not in ("GET", "HEAD"):
        raise MethodNotAllowedError(request.method, context={"path": "/favicon.ico"})
    return Response(
        content=FAVICON_ICO,
        media_type=FAVICON_CONTENT_TYPE,
        headers={"Cache-Control": "public, max-age=86400"},
    )


@router.api_route("/{path:path}", methods=ALL_METHODS, include_in_schema=False)
async def note_endpoint(
    request: Request,
    service: NoteService = Depends(get_note_service),
) -> Response:
    if request.method == "GET":
        return await read_note(request, service)
    if request.method == "POST":
        return await write_note(request, service)
    if request.method == "OPTIONS":
        return Response(status_code=200)
    raise MethodNotAllowedError(request.method, context={"path": request.url.path})


# ── Handlers ──────────────────────────────────────────────────────────────


async def read_note(request: Request, service: NoteService) -> Response:
    note_id = extract_read_note_id(request.query_params, request.url.path)
    reply = read_reply_format(request.headers, note_id)

    content = await service.read_note(note_id)

    if reply is ReplyFormat.PLAIN:
        if not content:
            raise NotFoundError(resource="Note", resource_id=note_id)
        # The stored bytes go back untouched, binary included
        return Response(content=encode_content(content), media_type=PLAIN_CONTENT_TYPE)

    if reply is ReplyFormat.JSON:
        payload = NoteContentResponse(note_id=note_id, content=display_content(content))
        return JSONResponse(payload.model_dump(by_alias=True))

    return HTMLResponse(render_note_page(note_id, display_content(content)))


async def write_note(request: Request, service: NoteService) -> Response:
    content_type = request.headers.get("content-type", "")
    body = await request.body()

    note_request = parse_note_request(content_type, body, request.query_params, request.url.path)
    outcome = await service.write_note(note_request.note_id, note_request.content)

    reply = write_reply_format(request.headers, content_type)

    if reply is ReplyFormat.PLAIN:
        url = share_url(
            request.headers,
            scheme=request.url.scheme,
            host=request.headers.get("host") or request.url.netloc,
            path=request.url.path,
            note_id=outcome.note_id,
            public_url=settings.public_url,
        )
        return PlainTextResponse(url + "\n")

    if reply is ReplyFormat.FORM:
        return PlainTextResponse(f"OK: {outcome.note_id}\n")

    payload = NoteResponse(success=True, note_id=outcome.note_id)
    return JSONResponse(payload.model_dump(by_alias=True, exclude_none=True))
