# Middleware package init
"""
Recortes Backend - Middleware Package
======================================

Middleware Chain (request direction):
    Request → [Request ID] → [Access Log] → [GZip] → [CORS] → Route Handler

    Request ID runs first so the access log line and any error envelope
    carry the same id. Responses unwind in reverse order.
"""
