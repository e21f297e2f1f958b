"""
共通フィクスチャと収集設定。

- テスト向けの環境変数を毎テスト自動設定（autouse）
- 設定キャッシュとロギング状態をテストごとにリセット
- ルートを `sys.path` に追加して `import asyncbars.*` を解決
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from pathlib import Path

import pytest

# プロジェクトルート（このファイルの親の親）をパスに追加
_PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(_PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(_PROJECT_ROOT))


@pytest.fixture(autouse=True)
def _test_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """テスト用の環境変数を設定し、設定キャッシュを毎回作り直す。"""
    from asyncbars.config import clear_settings_cache

    monkeypatch.setenv("ASYNCBARS_ENVIRONMENT", "testing")
    monkeypatch.delenv("ASYNCBARS_HELPER_TIMEOUT", raising=False)
    monkeypatch.delenv("ASYNCBARS_LOG_FILE", raising=False)
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def _reset_logging_state() -> Iterator[None]:
    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    try:
        yield
    finally:
        for handler in list(root_logger.handlers):
            if handler not in original_handlers:
                root_logger.removeHandler(handler)
                handler.close()


@pytest.fixture
def jinja_engine():
    """ヘルパー未登録の JinjaEngine"""
    from asyncbars.template_system import JinjaEngine

    return JinjaEngine()


@pytest.fixture
def template_engine_tmp(tmp_path):
    """AsyncTemplateEngine を一時ディレクトリで提供する共通フィクスチャ。"""
    from asyncbars.template_system import AsyncTemplateEngine

    return AsyncTemplateEngine(tmp_path)
