"""Public surface for ifdef.core: data model, errors and protocols."""

from ifdef.core.errors import (
    DirectiveError,
    ExpressionError,
    IfdefError,
    UnterminatedBlockError,
)
from ifdef.core.interfaces import (
    DirectiveMatcherProtocol,
    ExpressionEvaluatorProtocol,
)
from ifdef.core.models import (
    BlockResult,
    Diagnostic,
    DirectiveToken,
    FormatResult,
    LoadResult,
    SourceLocation,
)

__all__ = [
    "BlockResult",
    "Diagnostic",
    "DirectiveToken",
    "FormatResult",
    "LoadResult",
    "SourceLocation",
    "IfdefError",
    "UnterminatedBlockError",
    "ExpressionError",
    "DirectiveError",
    "DirectiveMatcherProtocol",
    "ExpressionEvaluatorProtocol",
]
