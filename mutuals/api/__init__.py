"""HTTP layer of the Mutuals+ API.

- **main**: Application factory and lifecycle
- **routers**: One router per domain module, mounted under the API prefix
- **dependencies**: Request gates (rate limit, authentication, authorization,
  validation) declared per route
- **cache**: Response caching and invalidation decorators
- **middleware**: Security headers, correlation ids, request logging and the
  terminal error handlers
- **utils.responses**: The response envelope
"""
