from __future__ import annotations

"""
matcher – single-line directive recognition.

A directive is any line the configured pattern finds a `token` group in,
provided the token is one of the recognized directive names. The pattern
may also capture an `expression` group (absent for `else`/`endif`).

Only the recognized names count: `///#region` or a documentation comment
that happens to contain `// #123` is ordinary content.
"""

import re
from typing import Optional, Pattern, Union

from ifdef.constants import DOUBLE_SLASH_PATTERN, TRIPLE_SLASH_PATTERN
from ifdef.core.models import DIRECTIVE_TOKENS, DirectiveToken


def compile_pattern(pattern: Union[str, Pattern[str], None] = None, *, require_triple_slash: bool = True) -> Pattern[str]:
    """Return the directive pattern to use.

    A custom *pattern* wins; otherwise the triple- or double-marker default
    is chosen according to *require_triple_slash*.

    Raises:
        ValueError: If the pattern is invalid or lacks a `token` group.
    """
    if pattern is None:
        pattern = TRIPLE_SLASH_PATTERN if require_triple_slash else DOUBLE_SLASH_PATTERN
    if isinstance(pattern, str):
        try:
            pattern = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f'invalid directive pattern {pattern!r}: {exc}') from exc
    if 'token' not in pattern.groupindex:
        raise ValueError(f"directive pattern {pattern.pattern!r} has no named group 'token'")
    return pattern


class DirectiveMatcher:
    """Regex-driven directive recognizer."""

    def __init__(self, pattern: Union[str, Pattern[str], None] = None, *, require_triple_slash: bool = True) -> None:
        self._rx = compile_pattern(pattern, require_triple_slash=require_triple_slash)
        self._has_expression = 'expression' in self._rx.groupindex

    @property
    def pattern(self) -> Pattern[str]:
        return self._rx

    def match(self, line: str) -> Optional[DirectiveToken]:
        m = self._rx.search(line)
        if not m:
            return None
        token = m.group('token')
        if token not in DIRECTIVE_TOKENS:
            return None
        expression = (m.group('expression') if self._has_expression else None) or ''
        return DirectiveToken(
            token=token,
            expression=expression,
            column=m.start(),
            length=len(m.group(0)),
        )
