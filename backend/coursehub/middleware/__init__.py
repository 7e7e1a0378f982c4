"""
CourseHub Backend: Middleware Package
=====================================

What:  Cross-cutting concerns applied to every request.

Middleware Chain:
    Request → [Rate Limit] → [Request ID] → [Logging] → [GZip/CORS] → Route

    Response ← [Rate Limit] ← [Request ID] ← [Logging] ← [GZip/CORS] ← Route

    - Rate limiting rejects abusive clients before anything else runs
    - The request ID is set before the access log line is written
    - The access logger sees the final status code and duration
"""
