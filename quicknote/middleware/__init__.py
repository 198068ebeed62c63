# Middleware package init
"""
QuickNote - Middleware Package
================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS headers] → Route Handler

    1. Request ID first: every later log line can carry the correlation id
    2. Logging: records status and duration of the finished response
    3. CORS headers innermost: added to POST/OPTIONS responses, including
       error responses produced by the exception handlers

    The order is reversed for responses.
"""
