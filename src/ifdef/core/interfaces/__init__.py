from .evaluator import ExpressionEvaluatorProtocol
from .logging import LoggerFactoryProtocol, LoggerLikeProtocol
from .matcher import DirectiveMatcherProtocol

__all__ = [
    'DirectiveMatcherProtocol',
    'ExpressionEvaluatorProtocol',
    'LoggerFactoryProtocol',
    'LoggerLikeProtocol',
]
