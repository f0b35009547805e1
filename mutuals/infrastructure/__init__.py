"""Infrastructure layer: persistence, key-value store and outbound services.

- **database**: Async SQLAlchemy models, sessions and repositories
- **kv**: Key-value store used by the response cache and the rate limiter
- **integrations**: Transactional email and mailing-list HTTP clients
"""
