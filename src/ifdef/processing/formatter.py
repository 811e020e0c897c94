from __future__ import annotations

"""
formatter – whole-file orchestration and rendering.

`Formatter.format` finds every top-level `if`, lets `BlockParser` work out
which lines are inactive, and renders the file with those lines
neutralized in place. Lines are never removed, so the output always has the
same number of lines as the input.

Fatal errors are caught here exactly once, enriched with a
`SourceLocation` (line text, and column/length when the offending line is a
directive) and re-raised. No partial output is ever returned.
"""

from typing import List, Optional, Set

from ifdef.constants import COMMENT_PREFIX
from ifdef.core.errors import IfdefError
from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.core.interfaces.matcher import DirectiveMatcherProtocol
from ifdef.core.models import Diagnostic, FormatResult, SourceLocation
from ifdef.logging.helpers import get_logger
from ifdef.processing.block_parser import BlockParser


class Formatter:
    def __init__(
        self,
        *,
        matcher: DirectiveMatcherProtocol,
        block_parser: BlockParser,
        fill_with_spaces: bool = False,
        comment_prefix: str = COMMENT_PREFIX,
        logger: Optional[LoggerLikeProtocol] = None,
    ) -> None:
        self._matcher = matcher
        self._parser = block_parser
        self._fill = fill_with_spaces
        self._prefix = comment_prefix
        self._log = logger or get_logger('formatter')

    def format(self, text: str, *, file: Optional[str] = None) -> FormatResult:
        """Transform *text*, returning the rendered text and its warnings.

        Raises:
            IfdefError: The first fatal condition met, with `location` set.
        """
        lines = text.split('\n')
        suppressed: Set[int] = set()
        diagnostics: List[Diagnostic] = []

        def _warn(diag: Diagnostic) -> None:
            diagnostics.append(diag.with_file(file))

        i = 0
        try:
            while i < len(lines):
                tok = self._matcher.match(lines[i])
                if tok is None or tok.kind != 'if':
                    i += 1
                    continue
                block = self._parser.parse(lines, i, ignore=False, warn=_warn, file=file)
                suppressed |= block.suppressed
                i = block.end + 1
        except IfdefError as err:
            self._enrich(err, lines, file)
            self._log.debug('rejecting %s: %s', file or '<text>', err)
            raise

        if suppressed:
            self._log.debug('suppressing %d of %d lines in %s', len(suppressed), len(lines), file or '<text>')
        rendered = [self.render_line(ln) if idx in suppressed else ln for idx, ln in enumerate(lines)]
        return FormatResult(text='\n'.join(rendered), diagnostics=diagnostics)

    def render_line(self, line: str) -> str:
        """Neutralize one line without changing its position."""
        if not self._fill:
            return self._prefix + line
        if line.endswith('\r'):
            return ' ' * (len(line) - 1) + '\r'
        return ' ' * len(line)

    def _enrich(self, err: IfdefError, lines: List[str], file: Optional[str]) -> None:
        idx = err.line if err.line is not None and 0 <= err.line < len(lines) else None
        if idx is None:
            err.location = SourceLocation(line=1, line_text=lines[0] if lines else '', file=file)
            return
        tok = self._matcher.match(lines[idx])
        err.location = SourceLocation(
            line=idx + 1,
            line_text=lines[idx],
            column=tok.column if tok else None,
            length=tok.length if tok else None,
            file=file,
        )
