"""Render passes that resolve async helper placeholders"""

import asyncio
import time
from collections.abc import Callable, Mapping
from typing import Any

from markupsafe import escape

from asyncbars.config import get_settings
from asyncbars.utils.error_handler import ErrorHandler
from asyncbars.utils.logger import get_logger, log_render_pass

from .base import IHelperEngine, ISourceEngine
from .models import AsyncHelperTimeoutError, EntryState, PendingEntry
from .placeholder import TOKEN_PATTERN, error_marker, format_value
from .registry import PendingRegistry, activate

logger = get_logger(__name__)


async def render_async(
    engine: IHelperEngine,
    template_name: str,
    model: Mapping[str, Any] | None = None,
    *,
    timeout: float | None = None,
) -> str:
    """テンプレートをレンダリングし、非同期ヘルパーの結果を埋め込む

    Args:
        engine: 同期テンプレートエンジン
        template_name: 登録済みテンプレート名
        model: テンプレートに渡すコンテキスト
        timeout: 各ヘルパーの待機上限（秒）。None の場合は設定値を使用

    Returns:
        プレースホルダを含まない最終テキスト
    """
    return await _run_render_pass(
        engine,
        template_name,
        lambda: engine.render(template_name, model or {}),
        timeout,
    )


async def render_source_async(
    engine: ISourceEngine,
    source: str,
    model: Mapping[str, Any] | None = None,
    *,
    timeout: float | None = None,
) -> str:
    """Render an ad-hoc template string through the same resolution protocol."""
    return await _run_render_pass(
        engine,
        "<string>",
        lambda: engine.render_source(source, model or {}),
        timeout,
    )


async def _run_render_pass(
    engine: IHelperEngine,
    label: str,
    render_sync: Callable[[], str],
    timeout: float | None,
) -> str:
    started = time.perf_counter()
    registry = PendingRegistry()

    with activate(registry):
        try:
            output = render_sync()
        except Exception:
            registry.discard()
            raise

    # no asynchronous helpers called
    if not registry:
        return output

    if timeout is None:
        timeout = get_settings().helper_timeout

    entries = registry.snapshot()
    try:
        await asyncio.gather(*(_settle(entry, timeout) for entry in entries))
        output = _substitute(
            output, entries, registry, label, getattr(engine, "autoescape", False)
        )
    finally:
        registry.discard()

    log_render_pass(
        label,
        deferred=len(entries),
        failed=sum(1 for entry in entries if entry.error is not None),
        processing_time_ms=int((time.perf_counter() - started) * 1000),
    )
    return output


async def _settle(entry: PendingEntry, timeout: float | None) -> None:
    """Await one computation exactly once and record its outcome."""
    try:
        if timeout is None:
            value = await entry.computation
        else:
            value = await asyncio.wait_for(entry.computation, timeout)
    except asyncio.CancelledError as e:
        # the render itself is being cancelled
        task = asyncio.current_task()
        if task is not None and task.cancelling():
            raise
        entry.reject(e)
    except TimeoutError as e:
        if timeout is None:
            entry.reject(e)
        else:
            entry.reject(AsyncHelperTimeoutError(entry.helper_name, timeout))
    except Exception as e:
        entry.reject(e)
    else:
        entry.resolve(value)


def _substitute(
    output: str,
    entries: list[PendingEntry],
    registry: PendingRegistry,
    label: str,
    autoescape: bool,
) -> str:
    replacements: dict[str, str] = {}
    for entry in entries:
        if entry.state is EntryState.RESOLVED:
            replacements[entry.id] = _resolved_text(entry.value, autoescape)
            logger.debug("Resolved async helper", helper=entry.helper_name)
        else:
            replacements[entry.id] = ErrorHandler.log_and_return_default(
                "resolve async helper",
                entry.error,
                error_marker(entry.error),
                helper=entry.helper_name,
                entry_id=entry.id,
                template=label,
            )

    # single scan, tokens of other passes are left intact
    found: set[str] = set()

    def replace_token(match: Any) -> str:
        text = replacements.get(match.group(1))
        if text is None:
            return match.group(0)
        found.add(match.group(1))
        return text

    output = TOKEN_PATTERN.sub(replace_token, output)

    for entry in entries:
        if entry.id not in found:
            logger.warning(
                "Placeholder not found in rendered output",
                helper=entry.helper_name,
                entry_id=entry.id,
                template=label,
            )
        entry.mark_substituted()
        registry.remove(entry.id)

    return output


def _resolved_text(value: Any, autoescape: bool) -> str:
    if not autoescape:
        return format_value(value)
    if hasattr(value, "__html__"):
        return str(value.__html__())
    return str(escape(format_value(value)))
