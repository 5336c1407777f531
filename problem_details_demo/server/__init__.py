"""
Problem Details Server Package.

This package contains the web server implementation: the FastAPI application,
its configuration, routers, middleware and exception handling.

Subpackages:
    api: FastAPI route definitions (health and example endpoints).
    core: Settings and constants.
    exception_handlers: Ordered exception advices, the resolver and error rendering.
    middleware: Request logging middleware.
"""
