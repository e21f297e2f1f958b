"""Placeholder tokens and inline diagnostic markers"""

import re
from typing import Any

# Private-use code points never produced by templates and untouched by HTML escaping
TOKEN_OPEN = "\ue000"
TOKEN_CLOSE = "\ue001"

TOKEN_PATTERN = re.compile(f"{TOKEN_OPEN}([0-9a-f]{{32}}){TOKEN_CLOSE}")

ERROR_MARKER_TEMPLATE = "<!-- error in async promise: {reason} -->"


def make_token(entry_id: str) -> str:
    """Wrap an entry id in placeholder delimiters"""
    return f"{TOKEN_OPEN}{entry_id}{TOKEN_CLOSE}"


def contains_token(text: str) -> bool:
    return TOKEN_PATTERN.search(text) is not None


def error_marker(error: BaseException | str) -> str:
    """失敗したヘルパーの位置に埋め込む HTML コメントを生成"""
    if isinstance(error, BaseException):
        reason = str(error) or type(error).__name__
    else:
        reason = error
    # both "-->" and "--!>" close an HTML comment
    reason = reason.replace("--!>", "--!&gt;").replace("-->", "--&gt;")
    return ERROR_MARKER_TEMPLATE.format(reason=reason)


def format_value(value: Any) -> str:
    """Format a resolved value for insertion into rendered text"""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list | tuple):
        return ", ".join(str(item) for item in value)
    return str(value)
