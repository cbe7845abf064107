"""
All-Server Backend — Middleware Package
=========================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → [Upload Size Limit] → Route Handler

    Request ID runs first so the access log line and every log record
    emitted while handling the request carry the same ID.
    The upload size limit answers before the multipart body is parsed.
"""
