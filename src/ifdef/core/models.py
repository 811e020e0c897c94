from dataclasses import dataclass, field, replace
from typing import FrozenSet, List, Literal, Optional

# Single source of truth for diagnostics shared by the core and the plugin
Severity = Literal['warning', 'error']

_ALIASES = {
    'elif': 'elseif',
    'warn': 'warning',
    'err': 'error',
}

DIRECTIVE_TOKENS: FrozenSet[str] = frozenset(
    {'if', 'elseif', 'elif', 'else', 'endif', 'warning', 'warn', 'error', 'err'}
)


@dataclass(frozen=True)
class DirectiveToken:
    """A directive recognized on a single line."""
    token: str
    expression: str = ''
    column: int = 0
    length: int = 0

    @property
    def kind(self) -> str:
        """Canonical directive name with aliases folded (elif → elseif)."""
        return _ALIASES.get(self.token, self.token)


@dataclass(frozen=True)
class SourceLocation:
    """Where a diagnostic points to. `line` is 1-based, `column` 0-based."""
    line: int
    line_text: str = ''
    column: Optional[int] = None
    length: Optional[int] = None
    file: Optional[str] = None

    def format(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        parts.append(str(self.line))
        if self.column is not None:
            parts.append(str(self.column + 1))
        return ':'.join(parts)


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    line: int
    column: Optional[int] = None
    length: Optional[int] = None
    line_text: str = ''
    file: Optional[str] = None

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(
            line=self.line,
            line_text=self.line_text,
            column=self.column,
            length=self.length,
            file=self.file,
        )

    def with_file(self, file: Optional[str]) -> 'Diagnostic':
        return replace(self, file=file)

    def format(self) -> str:
        return f'{self.location.format()}: {self.severity}: {self.message}'


@dataclass(frozen=True)
class BlockResult:
    """Outcome of parsing one top-level `if` … `endif` block."""
    end: int
    suppressed: FrozenSet[int] = frozenset()


@dataclass(frozen=True)
class FormatResult:
    text: str
    diagnostics: List[Diagnostic] = field(default_factory=list)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == 'warning']


@dataclass(frozen=True)
class LoadResult:
    """What the plugin hands back to its host for one file.

    `contents` is None whenever `errors` is non-empty; a file is rejected in
    full and never partially transformed.
    """
    contents: Optional[str]
    loader: str
    warnings: List[Diagnostic] = field(default_factory=list)
    errors: List[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors
