from __future__ import annotations

import logging
from typing import Optional

from ifdef.logging.helpers import get_logger
from ifdef.parsing.expression import ExpressionEvaluator
from ifdef.parsing.matcher import DirectiveMatcher
from ifdef.processing.block_parser import BlockParser
from ifdef.processing.formatter import Formatter
from ifdef.runtime.settings import PreprocessorSettings


def build_formatter(settings: Optional[PreprocessorSettings] = None, *,
                    logger: Optional[logging.Logger] = None) -> Formatter:
    """Wire matcher, evaluator, block parser and formatter from *settings*.

    The variable environment is resolved (and frozen) once here; the
    returned formatter can process any number of files.
    """
    cfg = settings or PreprocessorSettings()
    lg = logger or get_logger('ifdef')
    matcher = DirectiveMatcher(cfg.resolve_pattern())
    evaluator = ExpressionEvaluator(verbose=cfg.verbose, logger=lg.getChild('expr'))
    parser = BlockParser(
        matcher=matcher,
        evaluator=evaluator,
        variables=cfg.resolve_variables(),
        verbose=cfg.verbose,
        logger=lg.getChild('parser'),
    )
    return Formatter(
        matcher=matcher,
        block_parser=parser,
        fill_with_spaces=cfg.fill_with_spaces,
        comment_prefix=cfg.comment_prefix,
        logger=lg.getChild('formatter'),
    )
