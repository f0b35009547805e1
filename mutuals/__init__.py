"""Mutuals+ API - content and community backend for the Mutuals+ platform.

Architecture Overview:
- **API Layer**: FastAPI routers, request gates (rate limit, auth, validation),
  response caching and the response envelope
- **Core Layer**: Configuration, logging, exceptions and request context
- **Domain Layer**: Services and repositories for auth, articles, newsletter
  and contact submissions
- **Infrastructure Layer**: Async SQLAlchemy persistence, the key-value store
  and third-party email and mailing list clients
"""
