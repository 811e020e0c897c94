from __future__ import annotations

import logging
from typing import Optional

from ifdef.constants import COMMENT_PREFIX, DOUBLE_SLASH_PATTERN, TRIPLE_SLASH_PATTERN
from ifdef.core.errors import (
    DirectiveError,
    ExpressionError,
    IfdefError,
    UnterminatedBlockError,
)
from ifdef.core.models import Diagnostic, DirectiveToken, FormatResult, LoadResult, SourceLocation
from ifdef.parsing.expression import ExpressionEvaluator
from ifdef.parsing.matcher import DirectiveMatcher
from ifdef.processing.block_parser import BlockParser
from ifdef.processing.formatter import Formatter
from ifdef.runtime.plugin import IfdefPlugin, detect_loader
from ifdef.runtime.settings import PreprocessorSettings
from ifdef.runtime.wiring import build_formatter

__version__ = '1.0.0'


def format_text(
    text: str,
    settings: Optional[PreprocessorSettings] = None,
    *,
    file: Optional[str] = None,
    logger: Optional[logging.Logger] = None,
) -> FormatResult:
    """One-shot helper: build a formatter from *settings* and run it on *text*.

    Raises:
        IfdefError: On the first fatal directive, with `location` set.
    """
    return build_formatter(settings, logger=logger).format(text, file=file)


__all__ = [
    'COMMENT_PREFIX',
    'DOUBLE_SLASH_PATTERN',
    'TRIPLE_SLASH_PATTERN',
    'BlockParser',
    'Diagnostic',
    'DirectiveError',
    'DirectiveMatcher',
    'DirectiveToken',
    'ExpressionError',
    'ExpressionEvaluator',
    'FormatResult',
    'Formatter',
    'IfdefError',
    'IfdefPlugin',
    'LoadResult',
    'PreprocessorSettings',
    'SourceLocation',
    'UnterminatedBlockError',
    'build_formatter',
    'detect_loader',
    'format_text',
]
