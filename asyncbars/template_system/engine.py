"""Jinja2-backed template engine and the async rendering facade"""

from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

from jinja2 import DictLoader, Environment, Template, TemplateNotFound, pass_context
from jinja2.runtime import Context

from asyncbars.config import Settings, get_settings

from .helpers import HelperFunc, register_async_helper
from .loader import TemplateLoader
from .models import TemplateNotFoundError
from .renderer import render_async, render_source_async


class JinjaEngine:
    """同期テンプレートエンジン - ヘルパー登録とテンプレート実行"""

    def __init__(self, autoescape: bool = False):
        self._sources: dict[str, str] = {}
        self._helpers: dict[str, Callable[..., Any]] = {}
        self.templates: dict[str, Template] = {}
        self.environment = Environment(
            loader=DictLoader(self._sources),
            autoescape=autoescape,
            keep_trailing_newline=True,
        )

    @property
    def autoescape(self) -> bool:
        return bool(self.environment.autoescape)

    @property
    def helpers(self) -> dict[str, Callable[..., Any]]:
        return dict(self._helpers)

    def register_helper(self, name: str, func: Callable[..., Any]) -> None:
        """Expose ``func`` as a template global receiving the render context."""
        self._helpers[name] = func

        @pass_context
        def call(context: Context, *args: Any, **kwargs: Any) -> Any:
            return func(context, *args, **kwargs)

        self.environment.globals[name] = call

    def unregister_helper(self, name: str) -> None:
        self._helpers.pop(name, None)
        self.environment.globals.pop(name, None)

    def register_template(self, name: str, source: str) -> Template:
        """Compile ``source`` and make it available by name, also for includes."""
        self._sources[name] = source
        self.templates.pop(name, None)
        template = self.environment.get_template(name)
        self.templates[name] = template
        return template

    def has_template(self, name: str) -> bool:
        return name in self._sources

    def render(self, template_name: str, model: Mapping[str, Any]) -> str:
        """Render a registered template synchronously."""
        template = self.templates.get(template_name)
        if template is None:
            try:
                template = self.environment.get_template(template_name)
            except TemplateNotFound as e:
                raise TemplateNotFoundError(
                    f"Template not found: {template_name}"
                ) from e
            self.templates[template_name] = template
        return template.render(dict(model))

    def render_source(self, source: str, model: Mapping[str, Any]) -> str:
        """Render a template string without registering it."""
        return self.environment.from_string(source).render(dict(model))


class AsyncTemplateEngine:
    """統合テンプレートエンジン - 読み込み、ヘルパー登録、非同期レンダリング"""

    def __init__(
        self,
        template_dir: str | Path | None = None,
        settings: Settings | None = None,
        autoescape: bool | None = None,
    ):
        self.settings = settings or get_settings()
        self.engine = JinjaEngine(
            autoescape=self.settings.autoescape if autoescape is None else autoescape
        )
        if template_dir is None:
            template_dir = self.settings.template_dir
        self.template_loader = TemplateLoader(
            Path(template_dir), extension=self.settings.template_extension
        )

    @property
    def template_path(self) -> Path:
        return self.template_loader.template_path

    def register_helper(self, name: str, func: HelperFunc) -> None:
        """同期ヘルパーを登録"""
        self.engine.register_helper(name, func)

    def register_async_helper(self, name: str, func: HelperFunc) -> None:
        """非同期ヘルパーを登録"""
        register_async_helper(self.engine, name, func)

    def register_template(self, name: str, source: str) -> None:
        self.engine.register_template(name, source)

    async def load_templates(self) -> list[str]:
        """テンプレートディレクトリの内容をエンジンに登録"""
        return await self.template_loader.load_into(self.engine)

    async def render(
        self,
        template_name: str,
        model: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        """テンプレートを非同期にレンダリング (未登録ならディスクから読み込み)"""
        if not self.engine.has_template(template_name):
            source = await self.template_loader.load_template(template_name)
            self.engine.register_template(template_name, source)
        return await render_async(
            self.engine,
            template_name,
            model,
            timeout=self._timeout(timeout),
        )

    async def render_string(
        self,
        source: str,
        model: Mapping[str, Any] | None = None,
        *,
        timeout: float | None = None,
    ) -> str:
        """テンプレート文字列を直接レンダリング"""
        return await render_source_async(
            self.engine, source, model, timeout=self._timeout(timeout)
        )

    def _timeout(self, timeout: float | None) -> float | None:
        return self.settings.helper_timeout if timeout is None else timeout
