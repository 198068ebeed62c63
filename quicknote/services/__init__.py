# Services package init
"""
QuickNote - Services Layer
============================

What:  Business logic between the routes (HTTP) and storage (persistence).

Service Inventory:
    - identifiers:         note id generation and validation
    - request_normalizer:  request → (note_id, content) and reply encoding
    - NoteService:         read / write-or-delete pipeline over a Storage
"""
