"""Utility modules for asyncbars"""

from .error_handler import (
    ErrorHandler,
    critical_operation,
    handle_errors,
    safe_with_default,
)
from .logger import (
    get_logger,
    log_render_pass,
    setup_logging,
)

__all__ = [
    "ErrorHandler",
    "critical_operation",
    "handle_errors",
    "safe_with_default",
    "get_logger",
    "setup_logging",
    "log_render_pass",
]
