"""Middleware for cross-cutting request/response concerns.

- **SecurityHeadersMiddleware**: Adds security headers to every response
- **RequestContextMiddleware**: Manages correlation IDs and request context
- **RequestLoggingMiddleware**: Structured request logging with timing
- **error_handler**: Terminal exception handlers producing the envelope

Middleware are executed in this order on the way in:
1. Security headers (first to process, last to respond)
2. Request context (sets up correlation IDs)
3. Request logging (logs with correlation context)
"""
