"""Per-render-pass registry of pending async helper results"""

from __future__ import annotations

import asyncio
import inspect
import uuid
from collections.abc import Awaitable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any

from .models import PendingEntry

_ACTIVE_REGISTRY: ContextVar[PendingRegistry | None] = ContextVar(
    "asyncbars_active_registry", default=None
)


class PendingRegistry:
    """1 回のレンダーパスが生成した保留エントリを保持するレジストリ"""

    def __init__(self) -> None:
        self._entries: dict[str, PendingEntry] = {}

    def add(self, helper_name: str, computation: Awaitable[Any]) -> PendingEntry:
        """Store a deferred computation under a fresh unique id."""
        entry_id = uuid.uuid4().hex
        while entry_id in self._entries:
            entry_id = uuid.uuid4().hex
        entry = PendingEntry(
            id=entry_id, helper_name=helper_name, computation=computation
        )
        self._entries[entry_id] = entry
        return entry

    def get(self, entry_id: str) -> PendingEntry | None:
        return self._entries.get(entry_id)

    def snapshot(self) -> list[PendingEntry]:
        """Return the current entries in insertion order."""
        return list(self._entries.values())

    def remove(self, entry_id: str) -> None:
        self._entries.pop(entry_id, None)

    def discard(self) -> None:
        """Drop every entry, closing or cancelling computations never awaited."""
        for entry in self._entries.values():
            if not entry.is_settled:
                close_awaitable(entry.computation)
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._entries


def close_awaitable(awaitable: Awaitable[Any]) -> None:
    """Release an awaitable that will never be awaited."""
    if inspect.iscoroutine(awaitable):
        # only never-started coroutines, running ones belong to their task
        if inspect.getcoroutinestate(awaitable) == inspect.CORO_CREATED:
            awaitable.close()
    elif isinstance(awaitable, asyncio.Future):
        awaitable.cancel()


def current_registry() -> PendingRegistry | None:
    """Registry of the render pass running in this context, if any."""
    return _ACTIVE_REGISTRY.get()


@contextmanager
def activate(registry: PendingRegistry) -> Iterator[PendingRegistry]:
    """Install ``registry`` as the active one for the enclosed block."""
    token = _ACTIVE_REGISTRY.set(registry)
    try:
        yield registry
    finally:
        _ACTIVE_REGISTRY.reset(token)
