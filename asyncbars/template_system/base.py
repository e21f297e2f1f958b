"""Template system base classes and protocols"""

from collections.abc import Callable, Mapping
from typing import Any, Protocol


class IHelperEngine(Protocol):
    """Synchronous templating engine interface the async layer depends on."""

    @property
    def helpers(self) -> Mapping[str, Callable[..., Any]]:
        """Currently registered helpers by name."""
        ...

    def register_helper(self, name: str, func: Callable[..., Any]) -> None:
        """Expose ``func`` to templates under ``name``."""
        ...

    def render(self, template_name: str, model: Mapping[str, Any]) -> str:
        """Render a registered template synchronously."""
        ...


class ISourceEngine(IHelperEngine, Protocol):
    """Engine that can also render template strings that were never registered."""

    def render_source(self, source: str, model: Mapping[str, Any]) -> str:
        """Render ``source`` synchronously."""
        ...
