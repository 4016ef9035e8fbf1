# Middleware package init
"""
VoterReg Backend — Middleware Package
======================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    The access log runs inside the request-id middleware, so every access
    line and every error response share the same correlation id.
"""
