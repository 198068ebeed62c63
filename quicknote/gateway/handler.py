"""
QuickNote - AWS Lambda Entry Point
====================================

What:  Serves API Gateway events with the same FastAPI app the HTTP server
       runs.
How:   The event is translated into a GatewayRequest (gateway.events) and
       replayed in-process through the ASGI app with httpx.ASGITransport.
       The event's source IP becomes the transport peer, so client-address
       logging behaves as it does under uvicorn. The captured response is
       packed back into the envelope of the originating event kind.
Who:   Configured as the Lambda handler: quicknote.gateway.handler.lambda_handler

Cold start:
    Importing this module configures logging and builds the app once
    (storage backend from settings, S3 inside Lambda). Warm invocations
    reuse both.
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx
from fastapi import FastAPI

from quicknote.gateway.events import (
    GatewayRequest,
    UnsupportedEventError,
    build_v1_response,
    build_v2_response,
    detect_event_kind,
    request_from_test_event,
    request_from_v1,
    request_from_v2,
    unsupported_event_response,
)
from quicknote.main import app as default_app
from quicknote.main import setup_logging

logger = logging.getLogger(__name__)

setup_logging()

# Hop-by-hop / framing headers httpx recomputes from the replayed body
_DROPPED_REQUEST_HEADERS = frozenset({"content-length", "transfer-encoding", "connection"})

_PLACEHOLDER_HOST = "lambda.invalid"


async def dispatch(app: FastAPI, request: GatewayRequest) -> httpx.Response:
    """Run one GatewayRequest through `app` and return the buffered response."""
    headers = {k: v for k, v in request.headers.items() if k.lower() not in _DROPPED_REQUEST_HEADERS}
    host = headers.get("host") or _PLACEHOLDER_HOST

    transport = httpx.ASGITransport(
        app=app,
        # Unhandled errors are already turned into a 500 by the app's
        # exception handler; the replay must still return that response.
        raise_app_exceptions=False,
        client=(request.source_ip or "0.0.0.0", 0),
    )
    # API Gateway only terminates HTTPS
    async with httpx.AsyncClient(transport=transport, base_url=f"https://{host}") as client:
        return await client.request(
            request.method,
            request.target,
            headers=headers,
            content=request.body,
        )


async def handle_event(event: Any, app: Optional[FastAPI] = None) -> Dict[str, Any]:
    """
    Serve one Lambda event and return the API Gateway response dict.

    Args:
        event: The raw Lambda event
        app:   App to replay through; defaults to quicknote.main.app

    Unsupported events get a 400 without touching the app.
    """
    if app is None:
        app = default_app

    try:
        kind = detect_event_kind(event)
        if kind == "v2":
            request, build = request_from_v2(event), build_v2_response
        elif kind == "v1":
            request, build = request_from_v1(event), build_v1_response
        else:
            logger.info("Lambda console test event (keys: %s), serving GET /", sorted(event))
            request, build = request_from_test_event(), build_v2_response
    except UnsupportedEventError as e:
        logger.error("Unsupported event format: %s", e)
        return unsupported_event_response()

    logger.debug("Dispatching %s event: %s %s", kind, request.method, request.target)
    response = await dispatch(app, request)
    return build(response.status_code, dict(response.headers.items()), response.content)


def lambda_handler(event: Any, context: Any) -> Dict[str, Any]:
    """AWS Lambda entry point."""
    return asyncio.run(handle_event(event))
