"""Run the server with uvicorn: ``python -m problem_details_demo.server``."""

import uvicorn

from problem_details_demo.core.logging_config import setup_logging

from .core.config import settings


def main() -> None:
    setup_logging()
    uvicorn.run(
        "problem_details_demo.server.main:create_app",
        host=settings.server_host,
        port=settings.server_port,
        factory=True,
        log_level=settings.log_level.lower(),
        log_config=None,
    )


if __name__ == "__main__":
    main()
