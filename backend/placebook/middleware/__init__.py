# Middleware package init
"""
PlaceBook Backend: Middleware Package
=====================================

What:  Cross-cutting request handling.

Starlette middleware (outermost first):
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip] → [CORS] → Route

    - rate_limit.py: per-IP limit on login/signup
    - request_id.py: X-Request-ID correlation
    - logging.py:    one access-log line per request

Route dependencies:
    - auth.py:    require_auth, bearer token → AuthContext
    - upload.py:  image_upload, multipart image → StoredImage
"""
