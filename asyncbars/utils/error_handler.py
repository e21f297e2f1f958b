"""共通エラーハンドリングユーティリティ

非同期ヘルパーの失敗やテンプレート読み込みの失敗をログに残し、
フォールバック値を返すか例外を再送出する。
"""

import functools
import inspect
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

import structlog

logger = structlog.get_logger()

T = TypeVar("T")

AsyncFunc = Callable[..., Awaitable[Any]]


class ErrorHandler:
    """失敗した操作のログ記録"""

    @staticmethod
    def log_and_return_default(
        operation_name: str,
        exception: BaseException,
        default_value: T,
        **kwargs: Any,
    ) -> T:
        """エラーをログ記録し、``default_value`` を返す"""
        logger.error(
            f"Failed to {operation_name}",
            error=str(exception),
            error_type=type(exception).__name__,
            **kwargs,
        )
        return default_value


def handle_errors(
    operation_name: str,
    default_return: Any = None,
    reraise: bool = False,
    **log_kwargs: Any,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """Decorate a coroutine function so that its failures are logged.

    With ``reraise`` the exception propagates after logging, otherwise
    ``default_return`` is returned in its place.
    """

    def decorator(func: AsyncFunc) -> AsyncFunc:
        if not inspect.iscoroutinefunction(func):
            raise TypeError(f"{func.__qualname__} is not a coroutine function")

        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return await func(*args, **kwargs)
            except Exception as e:
                fallback = ErrorHandler.log_and_return_default(
                    operation_name, e, default_return, **log_kwargs
                )
                if reraise:
                    raise
                return fallback

        return wrapper

    return decorator


def safe_with_default(operation_name: str, default_value: Any, **log_kwargs: Any):
    """失敗時に ``default_value`` を返す"""
    return handle_errors(operation_name, default_return=default_value, **log_kwargs)


def critical_operation(operation_name: str, **log_kwargs: Any):
    """失敗をログに残して例外を再送出する"""
    return handle_errors(operation_name, reraise=True, **log_kwargs)
