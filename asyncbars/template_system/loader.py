"""Template loader for managing template files"""

from pathlib import Path
from typing import Protocol

import aiofiles

from asyncbars.utils.error_handler import critical_operation, safe_with_default
from asyncbars.utils.logger import logger

from .models import TemplateNotFoundError


class _TemplateSink(Protocol):
    def register_template(self, name: str, source: str) -> object: ...


class TemplateLoader:
    """テンプレートの読み込みと管理を担当"""

    def __init__(self, template_dir: Path, extension: str = ".j2"):
        self.template_path = Path(template_dir)
        self.extension = extension
        self.cached_templates: dict[str, str] = {}

    @critical_operation("load template")
    async def load_template(self, template_name: str) -> str:
        """テンプレートファイルを読み込む"""
        if template_name in self.cached_templates:
            return self.cached_templates[template_name]

        template_file = self._resolve(template_name)
        if not template_file.is_file():
            raise TemplateNotFoundError(f"Template not found: {template_name}")

        async with aiofiles.open(template_file, encoding="utf-8") as f:
            content = await f.read()

        self.cached_templates[template_name] = content
        logger.debug(f"Loaded and cached template: {template_name}")
        return content

    @safe_with_default("list templates", [])
    async def list_available_templates(self) -> list[str]:
        """利用可能なテンプレート一覧を取得"""
        if not self.template_path.exists():
            return []

        templates = []
        for file in self.template_path.rglob(f"*{self.extension}"):
            if file.is_file():
                templates.append(self._name_for(file))

        return sorted(templates)

    async def load_into(self, engine: _TemplateSink) -> list[str]:
        """Register every template under the directory on ``engine``.

        Templates are registered under their path relative to the template
        directory without the extension, so ``partials/header.j2`` becomes
        ``partials/header`` and can be pulled in with ``{% include %}``.
        """
        names = await self.list_available_templates()
        for name in names:
            engine.register_template(name, await self.load_template(name))
        logger.info("Templates loaded", count=len(names), path=str(self.template_path))
        return names

    def clear_cache(self) -> None:
        self.cached_templates.clear()

    def _resolve(self, template_name: str) -> Path:
        base = self.template_path.resolve()
        candidate = (base / f"{template_name}{self.extension}").resolve()
        if not candidate.is_relative_to(base):
            raise TemplateNotFoundError(
                f"Template '{template_name}' is outside {self.template_path}"
            )
        return candidate

    def _name_for(self, file: Path) -> str:
        relative = file.relative_to(self.template_path).as_posix()
        return relative[: -len(self.extension)] if self.extension else relative
