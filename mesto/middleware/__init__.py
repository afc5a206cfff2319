# Middleware package init
"""
Mesto Backend - Middleware Package
===================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [GZip] → [CORS] → Route Handler

    1. Request ID: correlation id for every log line of the request
    2. Logging: method, path, status, duration, caller (once authenticated)
    3. CORS: credentialed requests only from configured origins

Authentication is NOT middleware: it is the `require_identity` dependency,
attached to the protected routers, so public routes need no exemption list.
"""
