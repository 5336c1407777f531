"""
Core utilities for the problem details service.

This package provides logging configuration and Logfire monitoring setup
shared by the server modules.
"""

from problem_details_demo.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
