"""
QuickNote - Application Package Initializer
=============================================

What: Marks the `quicknote` directory as a Python package.
Who:  Imported by uvicorn (`quicknote.main:app`), the Lambda runtime
      (`quicknote.gateway.handler.lambda_handler`) and pytest.

Architecture Note:
    The service is a thin stack of layers, each replaceable on its own:

    ┌─────────────────────────────────────┐
    │   Gateway adapter (Lambda events)   │  ← event envelope → HTTP request
    ├─────────────────────────────────────┤
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │   Request normalizer + NoteService  │  ← (note_id, content), validation
    ├─────────────────────────────────────┤
    │     Storage (disk or S3 backend)    │  ← one key/value contract
    └─────────────────────────────────────┘

    No note state lives in the process between requests, so the HTTP server
    and the Lambda deployment can be swapped without shared memory.
"""

__version__ = "1.0.0"
