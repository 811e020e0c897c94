from __future__ import annotations
"""Expression evaluator protocol definitions."""

from typing import Any, Mapping, Optional, Protocol, runtime_checkable


@runtime_checkable
class ExpressionEvaluatorProtocol(Protocol):
    """Evaluate a directive expression against a read-only environment.

    Implementations must raise `ifdef.core.errors.ExpressionError` on any
    failure and must never mutate `env`.
    """

    def evaluate(self, expression: str, env: Mapping[str, Any], *, line: Optional[int] = None) -> bool:
        ...
