"""
Pending async helper entries and template system errors
"""

from collections.abc import Awaitable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .placeholder import make_token


class EntryState(str, Enum):
    """保留エントリの状態"""

    CREATED = "created"
    RESOLVED = "resolved"
    REJECTED = "rejected"
    SUBSTITUTED = "substituted"


_ALLOWED_TRANSITIONS: dict[EntryState, frozenset[EntryState]] = {
    EntryState.CREATED: frozenset({EntryState.RESOLVED, EntryState.REJECTED}),
    EntryState.RESOLVED: frozenset({EntryState.SUBSTITUTED}),
    EntryState.REJECTED: frozenset({EntryState.SUBSTITUTED}),
    EntryState.SUBSTITUTED: frozenset(),
}


class AsyncHelperError(Exception):
    """asyncbars の基底エラー"""


class RenderPassError(AsyncHelperError):
    """レンダーパス外で非同期ヘルパーが呼び出された"""


class AsyncHelperTimeoutError(AsyncHelperError):
    """非同期ヘルパーが制限時間内に完了しなかった"""

    def __init__(self, helper_name: str, timeout: float):
        super().__init__(f"helper '{helper_name}' timed out after {timeout:g}s")
        self.helper_name = helper_name
        self.timeout = timeout


class InvalidEntryStateError(AsyncHelperError):
    """Illegal state transition on a pending entry"""


class TemplateNotFoundError(AsyncHelperError, KeyError):
    """Template is neither registered nor present on disk"""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


@dataclass(eq=False)
class PendingEntry:
    """非同期ヘルパーの未解決結果を表すクラス"""

    id: str
    helper_name: str
    computation: Awaitable[Any]
    state: EntryState = EntryState.CREATED
    value: Any = None
    error: BaseException | None = field(default=None, repr=False)

    @property
    def token(self) -> str:
        """Placeholder emitted into the synchronous render output"""
        return make_token(self.id)

    @property
    def is_settled(self) -> bool:
        return self.state is not EntryState.CREATED

    def resolve(self, value: Any) -> None:
        self._transition(EntryState.RESOLVED)
        self.value = value

    def reject(self, error: BaseException) -> None:
        self._transition(EntryState.REJECTED)
        self.error = error

    def mark_substituted(self) -> None:
        self._transition(EntryState.SUBSTITUTED)

    def _transition(self, target: EntryState) -> None:
        if target not in _ALLOWED_TRANSITIONS[self.state]:
            raise InvalidEntryStateError(
                f"Entry {self.id} cannot move from {self.state.value} to {target.value}"
            )
        self.state = target
