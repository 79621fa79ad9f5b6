# Middleware package init
"""
DiveLog Backend: Middleware Package
===================================

Middleware Chain (outermost first):
    Request → [Rate Limit] → [Security Headers] → [Request ID] → [Logging]
            → [GZip] → [CORS] → Route Handler

    1. Rate Limit first: refuse abusive clients before any work
    2. Security Headers: size cap on bodies, headers on every response,
       including 429s produced further in
    3. Request ID: correlation id for logs and error bodies
    4. Logging: method, path, status and duration with the request id
"""
