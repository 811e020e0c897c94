from __future__ import annotations

"""
block_parser – branch state machine for one `if` … `endif` block.

The parser walks forward from an opening `if` and returns the index of its
matching `endif` together with every line index that must be suppressed.
Nested blocks are handled with an explicit stack of frames instead of
recursion, so nesting depth is bounded only by available memory.

Frame flags:
    done    some branch of this chain has already matched
    prune   the branch currently being scanned is inactive
    ignore  the whole block sits inside an inactive outer branch; nothing
            in it is evaluated and every line is suppressed
"""

from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Sequence, Set

from ifdef.core.errors import DirectiveError, UnterminatedBlockError
from ifdef.core.interfaces.evaluator import ExpressionEvaluatorProtocol
from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.core.interfaces.matcher import DirectiveMatcherProtocol
from ifdef.core.models import BlockResult, Diagnostic, DirectiveToken
from ifdef.logging.helpers import get_logger

WarningSink = Callable[[Diagnostic], None]


@dataclass
class BlockFrame:
    start: int
    ignore: bool = False
    done: bool = False
    prune: bool = False
    opened: bool = False

    @property
    def active(self) -> bool:
        return not (self.prune or self.ignore)


class BlockParser:
    def __init__(
        self,
        *,
        matcher: DirectiveMatcherProtocol,
        evaluator: ExpressionEvaluatorProtocol,
        variables: Mapping[str, Any],
        verbose: bool = False,
        logger: Optional[LoggerLikeProtocol] = None,
    ) -> None:
        self._matcher = matcher
        self._evaluator = evaluator
        self._vars = variables
        self._verbose = verbose
        self._log = logger or get_logger('parser')

    def parse(
        self,
        lines: Sequence[str],
        start: int,
        *,
        ignore: bool = False,
        warn: Optional[WarningSink] = None,
        file: Optional[str] = None,
    ) -> BlockResult:
        """Parse the block opened at *start*.

        Args:
            lines: Whole file, split on newline.
            start: Index of the opening `if` directive.
            ignore: Treat the block as nested in an inactive branch.
            warn: Receives a Diagnostic for every `warning` in an active branch.
            file: Source name used in verbose logging only.

        Returns:
            BlockResult with the `endif` index and the suppressed indices.

        Raises:
            ValueError: If *start* is not an `if` directive.
            DirectiveError: On an `error` directive in an active branch.
            ExpressionError: If a condition cannot be evaluated.
            UnterminatedBlockError: If input ends before the matching `endif`.
        """
        opening = self._matcher.match(lines[start]) if 0 <= start < len(lines) else None
        if opening is None or opening.kind != 'if':
            raise ValueError(f'line {start} does not open an if block')

        suppressed: Set[int] = set()
        stack: List[BlockFrame] = [BlockFrame(start=start, ignore=ignore)]
        i = start
        n = len(lines)

        while i < n:
            frame = stack[-1]
            line = lines[i]
            tok = self._matcher.match(line)
            if not frame.active:
                suppressed.add(i)
            if tok is None:
                if frame.active and self._verbose:
                    self._log.info('Including line %s:%d', file or '<text>', i + 1)
                i += 1
                continue
            suppressed.add(i)

            kind = tok.kind
            if kind == 'if':
                if frame.opened:
                    # Re-visit this line as the opening line of a nested frame.
                    stack.append(BlockFrame(start=i, ignore=not frame.active))
                    continue
                self._open(frame, tok, i)
            elif kind == 'endif':
                stack.pop()
                if not stack:
                    return BlockResult(end=i, suppressed=frozenset(suppressed))
            elif not frame.ignore:
                self._branch(frame, tok, i, lines, warn)
            i += 1

        raise UnterminatedBlockError(
            f'Unterminated #if found on line {stack[-1].start + 1}',
            line=stack[-1].start,
        )

    def _open(self, frame: BlockFrame, tok: DirectiveToken, index: int) -> None:
        frame.opened = True
        if frame.ignore:
            frame.done = False
            frame.prune = True
            return
        result = self._evaluator.evaluate(tok.expression, self._vars, line=index)
        frame.done = result
        frame.prune = not result

    def _branch(
        self,
        frame: BlockFrame,
        tok: DirectiveToken,
        index: int,
        lines: Sequence[str],
        warn: Optional[WarningSink],
    ) -> None:
        kind = tok.kind
        if kind == 'else':
            frame.prune = frame.done
            frame.done = True
        elif kind == 'elseif':
            if frame.done:
                frame.prune = True
            else:
                result = self._evaluator.evaluate(tok.expression, self._vars, line=index)
                frame.prune = not result
                frame.done = result
        elif kind == 'warning':
            if frame.prune:
                return
            diag = Diagnostic(
                severity='warning',
                message=tok.expression,
                line=index + 1,
                column=tok.column,
                length=tok.length,
                line_text=lines[index],
            )
            self._log.debug('warning directive on line %d: %s', index + 1, tok.expression)
            if warn is not None:
                warn(diag)
        elif kind == 'error':
            if not frame.prune:
                raise DirectiveError(tok.expression, line=index)
