from __future__ import annotations
"""Directive matcher protocol definitions."""

from typing import Optional, Protocol, runtime_checkable

from ifdef.core.models import DirectiveToken


@runtime_checkable
class DirectiveMatcherProtocol(Protocol):
    """Recognize a directive on a single line.

    Implementations return None for ordinary content.
    """

    def match(self, line: str) -> Optional[DirectiveToken]:
        ...
