"""
Utility modules for the device harness.

This package contains:
    - logger: Structured logging with structlog
    - security: Credential masking for log output
"""

from harness.utils.logger import LogContext, get_logger, setup_logging
from harness.utils.security import mask_sensitive, sanitize_for_logging

__all__ = [
    "get_logger",
    "setup_logging",
    "LogContext",
    "mask_sensitive",
    "sanitize_for_logging",
]
