"""Response helpers shared by routers and error handlers."""
