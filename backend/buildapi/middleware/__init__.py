# Middleware package init
"""
Build API — Middleware Package
================================

Middleware Chain:
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID: correlation id for log lines and the X-Request-ID header
    2. Logging: one access line per request, with the request id
    3. CORS: any origin, GET/POST/PUT/DELETE, Content-Type and Authorization
"""
