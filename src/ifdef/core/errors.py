from __future__ import annotations

"""Fatal error taxonomy.

Every condition that rejects a file derives from `IfdefError`. Errors are
raised with the 0-based index of the offending line and enriched exactly
once, by the formatter, with a `SourceLocation`.
"""

from typing import Optional

from ifdef.core.models import Diagnostic, SourceLocation


class IfdefError(Exception):
    """Base class for fatal preprocessing errors."""

    def __init__(self, message: str, *, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.line = line
        self.location: Optional[SourceLocation] = None

    def to_diagnostic(self) -> Diagnostic:
        loc = self.location
        if loc is None:
            return Diagnostic(
                severity='error',
                message=self.message,
                line=(self.line or 0) + 1,
            )
        return Diagnostic(
            severity='error',
            message=self.message,
            line=loc.line,
            column=loc.column,
            length=loc.length,
            line_text=loc.line_text,
            file=loc.file,
        )

    def __str__(self) -> str:
        if self.location is None:
            return self.message
        return f'{self.location.format()}: {self.message}'


class UnterminatedBlockError(IfdefError):
    """An `if` reached end of input without its `endif`."""


class ExpressionError(IfdefError):
    """A directive expression could not be evaluated."""

    def __init__(self, message: str, *, expression: str = '', line: Optional[int] = None) -> None:
        super().__init__(message, line=line)
        self.expression = expression


class DirectiveError(IfdefError):
    """Raised by an `#error` directive inside an active branch."""
