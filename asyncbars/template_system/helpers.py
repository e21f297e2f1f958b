"""Wrapping of async-capable helpers for the synchronous render contract"""

import functools
import inspect
from collections.abc import Callable
from typing import Any

from asyncbars.utils.logger import get_logger

from .base import IHelperEngine
from .models import RenderPassError
from .registry import close_awaitable, current_registry

logger = get_logger(__name__)

HelperFunc = Callable[..., Any]


def wrap_async_helper(name: str, func: HelperFunc) -> HelperFunc:
    """ヘルパーをラップし、awaitable な結果をプレースホルダに置き換える

    The wrapper keeps the engine's calling convention (``this`` followed by
    the helper's positional and hash arguments). Plain values are returned
    untouched; awaitables are parked in the active render pass's registry
    and the matching placeholder token is returned in their place.
    """

    @functools.wraps(func)
    def wrapped(this: Any, *args: Any, **kwargs: Any) -> Any:
        output = func(this, *args, **kwargs)

        # not awaitable, just forward the value
        if not inspect.isawaitable(output):
            return output

        registry = current_registry()
        if registry is None:
            close_awaitable(output)
            raise RenderPassError(
                f"Async helper '{name}' was invoked outside of render_async()"
            )

        entry = registry.add(name, output)
        logger.debug("Deferred async helper", helper=name, entry_id=entry.id)
        return entry.token

    return wrapped


def register_async_helper(engine: IHelperEngine, name: str, func: HelperFunc) -> None:
    """Register an async-capable helper on ``engine`` under ``name``."""
    if name in engine.helpers:
        logger.warning("Replacing existing helper", helper=name)
    engine.register_helper(name, wrap_async_helper(name, func))
    logger.debug("Registered async helper", helper=name)
