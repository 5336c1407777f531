"""
Monitoring and Tracing Configuration Module.

This module provides integration with Pydantic Logfire for request tracing
and error tracking. Logfire stays dormant unless ``LOGFIRE_ENABLED`` and
``LOGFIRE_TOKEN`` are both set; until then every helper here only writes to
the standard logger.
"""

import logging
import os
from typing import Optional

import logfire
from fastapi import FastAPI

logger = logging.getLogger(__name__)

# Logfire configuration from environment
LOGFIRE_ENABLED = os.getenv("LOGFIRE_ENABLED", "false").lower() in ("true", "1", "yes")
LOGFIRE_TOKEN = os.getenv("LOGFIRE_TOKEN", "")
LOGFIRE_ENVIRONMENT = os.getenv("LOGFIRE_ENVIRONMENT", "development")
LOGFIRE_SERVICE_NAME = os.getenv("LOGFIRE_SERVICE_NAME", "problem-details-demo")
LOGFIRE_SERVICE_VERSION = os.getenv("LOGFIRE_SERVICE_VERSION", "0.0.1")
LOGFIRE_TRACE_FASTAPI = os.getenv("LOGFIRE_TRACE_FASTAPI", "true").lower() in ("true", "1", "yes")

_logfire_configured = False


def is_logfire_configured() -> bool:
    return _logfire_configured


def initialize_logfire(app: Optional[FastAPI] = None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Args:
        app: FastAPI application instance. When given (and FastAPI tracing is
             on) every endpoint is traced automatically.

    Returns:
        True when Logfire was configured by this call or an earlier one.
    """
    global _logfire_configured

    if _logfire_configured:
        return True

    if not LOGFIRE_ENABLED:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        return False

    if not LOGFIRE_TOKEN:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        return False

    logfire.configure(
        token=LOGFIRE_TOKEN,
        service_name=LOGFIRE_SERVICE_NAME,
        service_version=LOGFIRE_SERVICE_VERSION,
        environment=LOGFIRE_ENVIRONMENT,
    )
    _logfire_configured = True

    if LOGFIRE_TRACE_FASTAPI and app is not None:
        logfire.instrument_fastapi(app=app)
        logger.info("Logfire: FastAPI instrumentation enabled")

    logger.info(f"Logfire monitoring initialized: environment={LOGFIRE_ENVIRONMENT}, service={LOGFIRE_SERVICE_NAME}")
    return True


def log_api_request(
    method: str, path: str, status_code: int, duration_ms: float, content_type: Optional[str] = None
) -> None:
    """
    Log an API request with performance metrics.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
        content_type: Response content type, telling apart problem details and other error bodies
    """
    logger.debug(f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)")
    if _logfire_configured:
        logfire.info(
            "API request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_ms=duration_ms,
            content_type=content_type,
        )


def log_error(error_type: str, error_message: str, context: Optional[dict] = None) -> None:
    """
    Log an error with context for debugging.

    Args:
        error_type: Type of error
        error_message: Error message
        context: Additional context dictionary
    """
    if _logfire_configured:
        logfire.error(
            "{error_type}: {error_message}",
            error_type=error_type,
            error_message=error_message,
            **(context or {}),
        )
