"""asyncbars - async helpers for synchronous template rendering"""

__version__ = "0.1.0"

from asyncbars.template_system import (
    AsyncTemplateEngine,
    JinjaEngine,
    register_async_helper,
    render_async,
    render_source_async,
)

__all__ = [
    "__version__",
    "AsyncTemplateEngine",
    "JinjaEngine",
    "register_async_helper",
    "render_async",
    "render_source_async",
]
