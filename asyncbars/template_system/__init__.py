"""Async helper support for synchronous template rendering"""

from .base import IHelperEngine, ISourceEngine
from .engine import AsyncTemplateEngine, JinjaEngine
from .helpers import register_async_helper, wrap_async_helper
from .loader import TemplateLoader
from .models import (
    AsyncHelperError,
    AsyncHelperTimeoutError,
    EntryState,
    InvalidEntryStateError,
    PendingEntry,
    RenderPassError,
    TemplateNotFoundError,
)
from .registry import PendingRegistry, current_registry
from .renderer import render_async, render_source_async

__all__ = [
    "IHelperEngine",
    "ISourceEngine",
    "AsyncTemplateEngine",
    "JinjaEngine",
    "register_async_helper",
    "wrap_async_helper",
    "TemplateLoader",
    "AsyncHelperError",
    "AsyncHelperTimeoutError",
    "EntryState",
    "InvalidEntryStateError",
    "PendingEntry",
    "RenderPassError",
    "TemplateNotFoundError",
    "PendingRegistry",
    "current_registry",
    "render_async",
    "render_source_async",
]
