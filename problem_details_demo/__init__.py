"""Problem Details Demo.

This package contains a small FastAPI service showing how a web application
reports errors as RFC 7807 problem details.

High-level architecture
-----------------------

Every error raised while serving a request ends up in one place, the
``ExceptionResolver``. The resolver walks an ordered list of *exception
advices* (objects grouping exception handlers) and renders whatever the
winning handler returns:

- JSON clients receive ``application/problem+json`` bodies (or plain error
  attributes when problem details are disabled).
- HTML clients receive the whitelabel error page.

Core subpackages
----------------

- ``problem_details_demo.core``: logging and monitoring setup.
- ``problem_details_demo.server``: the FastAPI application, its settings,
  routers, middleware and exception handling.
"""

__version__ = "0.0.1"
