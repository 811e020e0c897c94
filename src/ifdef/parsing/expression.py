from __future__ import annotations

"""
expression – boolean directive expressions.

Expressions are parsed by a small recursive-descent parser and evaluated
against a read-only variable environment. Nothing is handed to the host
interpreter: the only names in scope are the environment's keys and the
`defined(NAME)` built-in.

Grammar (lowest precedence first):

    or         := and (('||' | 'or') and)*
    and        := not (('&&' | 'and') not)*
    not        := 'not' not | comparison
    comparison := unary (compop unary)*
    unary      := ('!' | '-') unary | operand
    operand    := NUMBER | STRING | literal | NAME | NAME '(' args ')'
                | '[' args ']' | '(' or ')'

`&&` and `||` short-circuit and yield an operand value, the final value is
coerced by truthiness. `!` is a unary operator and binds tighter than any
comparison, so `!X === 1` reads as `(!X) === 1`. The `not` keyword sits
below the comparisons, so `not X == 1` reads as `not (X == 1)`.

`==` compares a number and a numeric string by value; `===` additionally
requires both sides to be of the same kind.
"""

import math
import re
from typing import Any, List, Mapping, NamedTuple, NoReturn, Optional, Sequence

from ifdef.core.errors import ExpressionError
from ifdef.core.interfaces.logging import LoggerLikeProtocol
from ifdef.logging.helpers import get_logger

_TOKEN_RX = re.compile(
    r"""
      (?P<ws>\s+)
    | (?P<number>0[xX][0-9a-fA-F]+|(?:\d+\.\d*|\.\d+|\d+)(?:[eE][+-]?\d+)?)
    | (?P<string>"(?:[^"\\]|\\.)*"|'(?:[^'\\]|\\.)*')
    | (?P<name>[A-Za-z_$][\w$]*)
    | (?P<op>===|!==|==|!=|<=|>=|&&|\|\||[<>!()\[\],-])
    """,
    re.VERBOSE,
)

_ESCAPES = {'n': '\n', 't': '\t', 'r': '\r', '0': '\0'}
_ESCAPE_RX = re.compile(r'\\(.)', re.DOTALL)

_LITERALS: Mapping[str, Any] = {
    'true': True,
    'false': False,
    'True': True,
    'False': False,
    'null': None,
    'undefined': None,
    'None': None,
}
_KEYWORDS = frozenset({'and', 'or', 'not', 'in'})
_COMPARISONS = frozenset({'===', '!==', '==', '!=', '<', '<=', '>', '>=', 'in', 'not in'})


class Token(NamedTuple):
    kind: str
    value: str
    pos: int


def tokenize(source: str) -> List[Token]:
    """Split *source* into tokens, raising ExpressionError on stray characters."""
    out: List[Token] = []
    pos = 0
    n = len(source)
    while pos < n:
        m = _TOKEN_RX.match(source, pos)
        if not m:
            raise ExpressionError(
                f'unexpected character {source[pos]!r} at column {pos + 1} in {source!r}',
                expression=source,
            )
        kind = m.lastgroup or ''
        value = m.group(0)
        if kind == 'name':
            if value in _LITERALS:
                kind = 'literal'
            elif value in _KEYWORDS:
                kind = 'keyword'
        if kind != 'ws':
            out.append(Token(kind, value, pos))
        pos = m.end()
    return out


def _unescape(body: str) -> str:
    return _ESCAPE_RX.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), body)


def _parse_number(text: str) -> Any:
    if text[:2] in ('0x', '0X'):
        return int(text, 16)
    if any(ch in text for ch in '.eE'):
        return float(text)
    return int(text)


# --------------------------------------------------------------------------- #
#  Value semantics                                                            #
# --------------------------------------------------------------------------- #
def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_number(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    if _is_number(value):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def _kind_of(value: Any) -> str:
    if value is None:
        return 'null'
    if isinstance(value, bool):
        return 'bool'
    if _is_number(value):
        return 'number'
    if isinstance(value, str):
        return 'string'
    return type(value).__name__


def loose_equals(left: Any, right: Any) -> bool:
    """Equality where a number, a bool and a numeric string compare by value."""
    if left is None or right is None:
        return left is None and right is None
    scalar = (bool, int, float)
    if isinstance(left, scalar) and isinstance(right, (str, bool)) or \
            isinstance(right, scalar) and isinstance(left, (str, bool)):
        return _to_number(left) == _to_number(right)
    return left == right


def strict_equals(left: Any, right: Any) -> bool:
    return _kind_of(left) == _kind_of(right) and left == right


def _ordered(left: Any, right: Any) -> tuple[Any, Any]:
    if _is_number(left) and isinstance(right, str) or _is_number(right) and isinstance(left, str):
        return _to_number(left), _to_number(right)
    return left, right


def _compare(op: str, left: Any, right: Any) -> Any:
    if op == '===':
        return strict_equals(left, right)
    if op == '!==':
        return not strict_equals(left, right)
    if op == '==':
        return loose_equals(left, right)
    if op == '!=':
        return not loose_equals(left, right)
    if op == 'in':
        return left in right
    if op == 'not in':
        return left not in right
    a, b = _ordered(left, right)
    if op == '<':
        return a < b
    if op == '<=':
        return a <= b
    if op == '>':
        return a > b
    return a >= b


# --------------------------------------------------------------------------- #
#  Syntax tree                                                                #
# --------------------------------------------------------------------------- #
class Node:
    def evaluate(self, env: Mapping[str, Any]) -> Any:
        raise NotImplementedError


class Literal(Node):
    def __init__(self, value: Any) -> None:
        self.value = value

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        return self.value


class Name(Node):
    def __init__(self, name: str) -> None:
        self.name = name

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        try:
            return env[self.name]
        except KeyError:
            raise NameError(f'name {self.name!r} is not defined') from None


class Defined(Node):
    def __init__(self, name: str) -> None:
        self.name = name

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        return self.name in env


class Call(Node):
    def __init__(self, name: str, args: Sequence[Node]) -> None:
        self.name = name
        self.args = list(args)

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        fn = Name(self.name).evaluate(env)
        if not callable(fn):
            raise TypeError(f'{self.name!r} is not callable')
        return fn(*[a.evaluate(env) for a in self.args])


class ListExpr(Node):
    def __init__(self, items: Sequence[Node]) -> None:
        self.items = list(items)

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        return [i.evaluate(env) for i in self.items]


class Not(Node):
    def __init__(self, operand: Node) -> None:
        self.operand = operand

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        return not self.operand.evaluate(env)


class Negate(Node):
    def __init__(self, operand: Node) -> None:
        self.operand = operand

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        value = self.operand.evaluate(env)
        if not _is_number(value):
            value = _to_number(value)
        return -value


class Logical(Node):
    def __init__(self, op: str, left: Node, right: Node) -> None:
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        value = self.left.evaluate(env)
        if self.op == 'and':
            return self.right.evaluate(env) if value else value
        return value if value else self.right.evaluate(env)


class Compare(Node):
    def __init__(self, op: str, left: Node, right: Node) -> None:
        self.op = op
        self.left = left
        self.right = right

    def evaluate(self, env: Mapping[str, Any]) -> Any:
        return _compare(self.op, self.left.evaluate(env), self.right.evaluate(env))


# --------------------------------------------------------------------------- #
#  Parser                                                                     #
# --------------------------------------------------------------------------- #
class ExpressionParser:
    """Recursive-descent parser producing a `Node` tree."""

    def __init__(self, source: str) -> None:
        self._src = source
        self._toks = tokenize(source)
        self._i = 0

    def parse(self) -> Node:
        if not self._toks:
            raise ExpressionError('empty expression', expression=self._src)
        node = self._or()
        tok = self._peek()
        if tok is not None:
            self._fail(f'unexpected {tok.value!r}', tok)
        return node

    def _peek(self, offset: int = 0) -> Optional[Token]:
        j = self._i + offset
        return self._toks[j] if j < len(self._toks) else None

    def _next(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise ExpressionError(f'unexpected end of expression in {self._src!r}', expression=self._src)
        self._i += 1
        return tok

    def _accept(self, *values: str) -> Optional[Token]:
        tok = self._peek()
        if tok is not None and tok.kind in ('op', 'keyword') and tok.value in values:
            self._i += 1
            return tok
        return None

    def _expect(self, value: str) -> Token:
        tok = self._accept(value)
        if tok is None:
            nxt = self._peek()
            if nxt is None:
                raise ExpressionError(f'expected {value!r} at end of {self._src!r}', expression=self._src)
            self._fail(f'expected {value!r} but found {nxt.value!r}', nxt)
        return tok

    def _fail(self, msg: str, tok: Token) -> NoReturn:
        raise ExpressionError(f'{msg} at column {tok.pos + 1} in {self._src!r}', expression=self._src)

    def _or(self) -> Node:
        node = self._and()
        while self._accept('||', 'or'):
            node = Logical('or', node, self._and())
        return node

    def _and(self) -> Node:
        node = self._not()
        while self._accept('&&', 'and'):
            node = Logical('and', node, self._not())
        return node

    def _not(self) -> Node:
        tok = self._peek()
        if tok is not None and tok.value == 'not' and tok.kind == 'keyword':
            self._i += 1
            return Not(self._not())
        return self._comparison()

    def _comparison(self) -> Node:
        node = self._unary()
        while True:
            op = self._comparison_op()
            if op is None:
                return node
            node = Compare(op, node, self._unary())

    def _comparison_op(self) -> Optional[str]:
        tok = self._peek()
        if tok is None or tok.kind not in ('op', 'keyword'):
            return None
        if tok.value == 'not':
            nxt = self._peek(1)
            if nxt is not None and nxt.value == 'in' and nxt.kind == 'keyword':
                self._i += 2
                return 'not in'
            return None
        if tok.value in _COMPARISONS:
            self._i += 1
            return tok.value
        return None

    def _unary(self) -> Node:
        if self._accept('!'):
            return Not(self._unary())
        if self._accept('-'):
            return Negate(self._unary())
        return self._operand()

    def _args(self, closing: str) -> List[Node]:
        args: List[Node] = []
        if self._accept(closing):
            return args
        args.append(self._or())
        while self._accept(','):
            args.append(self._or())
        self._expect(closing)
        return args

    def _operand(self) -> Node:
        tok = self._next()
        if tok.kind == 'number':
            return Literal(_parse_number(tok.value))
        if tok.kind == 'string':
            return Literal(_unescape(tok.value[1:-1]))
        if tok.kind == 'literal':
            return Literal(_LITERALS[tok.value])
        if tok.kind == 'name':
            if self._accept('('):
                if tok.value == 'defined':
                    return self._defined()
                return Call(tok.value, self._args(')'))
            return Name(tok.value)
        if tok.kind == 'op' and tok.value == '(':
            node = self._or()
            self._expect(')')
            return node
        if tok.kind == 'op' and tok.value == '[':
            return ListExpr(self._args(']'))
        self._fail(f'unexpected {tok.value!r}', tok)

    def _defined(self) -> Node:
        arg = self._next()
        if arg.kind == 'name':
            name = arg.value
        elif arg.kind == 'string':
            name = _unescape(arg.value[1:-1])
        else:
            self._fail('defined() expects a name', arg)
        self._expect(')')
        return Defined(name)


# --------------------------------------------------------------------------- #
#  Evaluator                                                                  #
# --------------------------------------------------------------------------- #
class ExpressionEvaluator:
    """Evaluate directive expressions against a read-only environment."""

    def __init__(
        self,
        *,
        verbose: bool = False,
        logger: Optional[LoggerLikeProtocol] = None,
    ) -> None:
        self._verbose = verbose
        self._log = logger or get_logger('expr')

    def parse(self, expression: str) -> Node:
        return ExpressionParser(expression.strip()).parse()

    def evaluate(self, expression: str, env: Mapping[str, Any], *, line: Optional[int] = None) -> bool:
        """Evaluate *expression* and coerce the result by truthiness.

        Raises:
            ExpressionError: On syntax errors, unknown names or any exception
                raised while evaluating, tagged with *line*.
        """
        try:
            result = bool(self.parse(expression).evaluate(env))
        except ExpressionError as exc:
            exc.line = line
            exc.expression = expression
            raise
        except Exception as exc:
            raise ExpressionError(
                f'error evaluating {expression!r}: {exc}',
                expression=expression,
                line=line,
            ) from exc
        if self._verbose:
            where = f' at line {line + 1}' if line is not None else ''
            self._log.info('Expression %r%s resulted with %s', expression, where, result)
        return result
