"""Test async helper wrapping and registration"""

import asyncio
from unittest.mock import Mock

import pytest

from asyncbars.template_system import (
    JinjaEngine,
    PendingRegistry,
    RenderPassError,
    register_async_helper,
    wrap_async_helper,
)
from asyncbars.template_system import helpers as helpers_module
from asyncbars.template_system.placeholder import TOKEN_PATTERN
from asyncbars.template_system.registry import activate


async def _value(context, suffix=""):
    return f"value{suffix}"


def test_plain_value_is_returned_unchanged() -> None:
    wrapped = wrap_async_helper("plain", lambda this, x: x * 2)

    assert wrapped(None, 21) == 42


def test_awaitable_is_parked_in_active_registry() -> None:
    registry = PendingRegistry()
    wrapped = wrap_async_helper("deferred", _value)

    with activate(registry):
        token = wrapped({"ctx": True}, suffix="!")

    match = TOKEN_PATTERN.fullmatch(token)
    assert match is not None
    entry = registry.get(match.group(1))
    assert entry is not None
    assert entry.helper_name == "deferred"
    assert asyncio.run(entry.computation) == "value!"


def test_each_invocation_gets_its_own_token() -> None:
    registry = PendingRegistry()
    wrapped = wrap_async_helper("deferred", _value)

    with activate(registry):
        tokens = [wrapped(None) for _ in range(10)]

    assert len(set(tokens)) == 10
    assert len(registry) == 10
    registry.discard()


def test_awaitable_outside_render_pass_raises() -> None:
    started = []

    async def helper(context):
        started.append(True)

    wrapped = wrap_async_helper("orphan", helper)

    with pytest.raises(RenderPassError, match="orphan"):
        wrapped(None)
    assert started == []


def test_sync_exception_propagates() -> None:
    def broken(context):
        raise KeyError("missing")

    wrapped = wrap_async_helper("broken", broken)
    registry = PendingRegistry()

    with activate(registry), pytest.raises(KeyError):
        wrapped(None)
    assert len(registry) == 0


def test_wrapper_keeps_function_metadata() -> None:
    wrapped = wrap_async_helper("value", _value)

    assert wrapped.__name__ == "_value"
    assert wrapped.__wrapped__ is _value


def test_register_async_helper_on_engine(jinja_engine: JinjaEngine) -> None:
    register_async_helper(jinja_engine, "value", _value)

    assert "value" in jinja_engine.helpers
    assert jinja_engine.helpers["value"].__wrapped__ is _value


def test_plain_engine_render_with_async_helper_fails(
    jinja_engine: JinjaEngine,
) -> None:
    register_async_helper(jinja_engine, "value", _value)
    jinja_engine.register_template("t", "{{ value() }}")

    with pytest.raises(RenderPassError):
        jinja_engine.render("t", {})


def test_replacing_helper_logs_warning(
    jinja_engine: JinjaEngine, monkeypatch: pytest.MonkeyPatch
) -> None:
    mock_logger = Mock()
    monkeypatch.setattr(helpers_module, "logger", mock_logger)

    register_async_helper(jinja_engine, "value", _value)
    mock_logger.warning.assert_not_called()

    register_async_helper(jinja_engine, "value", _value)
    mock_logger.warning.assert_called_once_with(
        "Replacing existing helper", helper="value"
    )
