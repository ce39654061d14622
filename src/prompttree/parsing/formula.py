"""
Parser and evaluator for conditional formulas.

Conditional nodes decide whether their subtree is included with a small
Excel-like expression language evaluated against the inputs mapping:

    =count>5
    =AND(a>1, b<10)
    =OR(role="admin", role="moderator")
    =NOT(ISBLANK(email))

Grammar (keywords and function names are case-insensitive):

    Formula    := '=' Expr
    Expr       := Comparison
    Comparison := Concat (('=' | '<>' | '<' | '>' | '<=' | '>=') Concat)*
    Concat     := Additive ('&' Additive)*
    Additive   := Term (('+' | '-') Term)*
    Term       := Unary (('*' | '/') Unary)*
    Unary      := '-' Unary | Primary
    Primary    := Number | String | TRUE | FALSE | Identifier | Call | '(' Expr ')'
    Call       := Name '(' [Expr (',' Expr)*] ')'

Malformed formulas raise FormulaParseError, as do formulas nested more than
MAX_NESTING parentheses or calls deep. Evaluation of a well-formed
formula never raises: missing identifiers are blank, and arithmetic faults
such as division by zero make the whole formula false.
"""

import logging
import operator
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from prompttree.exceptions.core import FormulaParseError

logger = logging.getLogger(__name__)

_TOKEN_PATTERN = re.compile(
    r"""
    (?P<ws>\s+)
  | (?P<number>(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)
  | (?P<string>"(?:[^"]|"")*")
  | (?P<name>[A-Za-z_][A-Za-z0-9_]*)
  | (?P<op><>|<=|>=|[=<>+\-*/&])
  | (?P<lparen>\()
  | (?P<rparen>\))
  | (?P<comma>,)
    """,
    re.VERBOSE,
)

_COMPARATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "<>": operator.ne,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
}

# name -> (minimum arguments, maximum arguments or None for variadic)
_FUNCTION_ARITY: dict[str, tuple[int, int | None]] = {
    "AND": (1, None),
    "OR": (1, None),
    "NOT": (1, 1),
    "IF": (2, 3),
    "ISBLANK": (1, 1),
    "LEN": (1, 1),
    "TRUE": (0, 0),
    "FALSE": (0, 0),
}

# Parenthesis and function call nesting accepted by the parser
MAX_NESTING = 20

# Height of the expression tree accepted for evaluation
MAX_TREE_DEPTH = 100


@dataclass(frozen=True)
class Token:
    """A lexical token with its character offset in the formula body."""

    kind: str
    text: str
    position: int


@dataclass(frozen=True)
class FormulaNode:
    """Base class for parsed formula expressions."""


@dataclass(frozen=True)
class Literal(FormulaNode):
    value: Any


@dataclass(frozen=True)
class Identifier(FormulaNode):
    name: str


@dataclass(frozen=True)
class Call(FormulaNode):
    function: str
    arguments: tuple[FormulaNode, ...]


@dataclass(frozen=True)
class Unary(FormulaNode):
    op: str
    operand: FormulaNode


@dataclass(frozen=True)
class Binary(FormulaNode):
    op: str
    left: FormulaNode
    right: FormulaNode


class _EvaluationFault(Exception):
    """Spreadsheet-style error value (#VALUE!, #DIV/0!) raised during evaluation."""


def tokenize(formula: str, body: str, offset: int = 0) -> list[Token]:
    """
    Split a formula body into tokens.

    Params:
        formula: Full formula text, used in error messages
        body: Formula text after the leading '='
        offset: Position of `body` within `formula`

    Returns:
        Tokens followed by a single `end` token

    Raises:
        FormulaParseError: On characters that do not start any token
    """
    tokens: list[Token] = []
    pos = 0
    while pos < len(body):
        match = _TOKEN_PATTERN.match(body, pos)
        if match is None:
            if body[pos] == '"':
                raise FormulaParseError(
                    formula, "unterminated string literal", offset + pos
                )
            raise FormulaParseError(
                formula, f"unexpected character {body[pos]!r}", offset + pos
            )
        kind = match.lastgroup
        if kind != "ws":
            tokens.append(Token(kind=kind, text=match.group(), position=offset + pos))
        pos = match.end()
    tokens.append(Token(kind="end", text="", position=offset + len(body)))
    return tokens


class FormulaParser:
    """Recursive descent parser producing a FormulaNode tree."""

    def __init__(self, formula: str):
        self.formula = formula
        if not formula.startswith("="):
            raise FormulaParseError(formula, "formula must start with '='", 0)
        self.tokens = tokenize(formula, formula[1:], offset=1)
        self.index = 0
        self.depth = 0

    def parse(self) -> FormulaNode:
        if self._peek().kind == "end":
            raise FormulaParseError(self.formula, "empty formula", 1)
        node = self._parse_comparison()
        token = self._peek()
        if token.kind != "end":
            raise FormulaParseError(
                self.formula, f"unexpected token {token.text!r}", token.position
            )
        self._check_tree_depth(node)
        return node

    def _check_tree_depth(self, root: FormulaNode) -> None:
        stack = [(root, 1)]
        while stack:
            node, depth = stack.pop()
            if depth > MAX_TREE_DEPTH:
                raise FormulaParseError(self.formula, "formula nested too deeply")
            stack.extend((child, depth + 1) for child in _children(node))

    def _descend(self, token: Token) -> None:
        self.depth += 1
        if self.depth > MAX_NESTING:
            raise FormulaParseError(self.formula, "formula nested too deeply", token.position)

    def _peek(self) -> Token:
        return self.tokens[self.index]

    def _advance(self) -> Token:
        token = self.tokens[self.index]
        self.index += 1
        return token

    def _expect(self, kind: str, description: str) -> Token:
        token = self._peek()
        if token.kind != kind:
            found = token.text or "end of formula"
            raise FormulaParseError(
                self.formula, f"expected {description}, found {found!r}", token.position
            )
        return self._advance()

    def _match_op(self, *ops: str) -> str | None:
        token = self._peek()
        if token.kind == "op" and token.text in ops:
            self._advance()
            return token.text
        return None

    def _parse_binary(
        self, operand: Callable[[], FormulaNode], ops: tuple[str, ...]
    ) -> FormulaNode:
        node = operand()
        op = self._match_op(*ops)
        while op is not None:
            node = Binary(op, node, operand())
            op = self._match_op(*ops)
        return node

    def _parse_comparison(self) -> FormulaNode:
        return self._parse_binary(self._parse_concat, tuple(_COMPARATORS))

    def _parse_concat(self) -> FormulaNode:
        return self._parse_binary(self._parse_additive, ("&",))

    def _parse_additive(self) -> FormulaNode:
        return self._parse_binary(self._parse_term, ("+", "-"))

    def _parse_term(self) -> FormulaNode:
        return self._parse_binary(self._parse_unary, ("*", "/"))

    def _parse_unary(self) -> FormulaNode:
        negations = 0
        op = self._match_op("-", "+")
        while op is not None:
            if op == "-":
                negations += 1
            op = self._match_op("-", "+")
        node = self._parse_primary()
        for _ in range(negations):
            node = Unary("-", node)
        return node

    def _parse_primary(self) -> FormulaNode:
        token = self._peek()

        if token.kind == "number":
            self._advance()
            return Literal(float(token.text))

        if token.kind == "string":
            self._advance()
            return Literal(token.text[1:-1].replace('""', '"'))

        if token.kind == "lparen":
            self._advance()
            self._descend(token)
            node = self._parse_comparison()
            self._expect("rparen", "')'")
            self.depth -= 1
            return node

        if token.kind == "name":
            self._advance()
            if self._peek().kind == "lparen":
                return self._parse_call(token)
            upper = token.text.upper()
            if upper == "TRUE":
                return Literal(True)
            if upper == "FALSE":
                return Literal(False)
            return Identifier(token.text)

        found = token.text or "end of formula"
        raise FormulaParseError(
            self.formula, f"expected a value, found {found!r}", token.position
        )

    def _parse_call(self, name_token: Token) -> FormulaNode:
        function = name_token.text.upper()
        if function not in _FUNCTION_ARITY:
            raise FormulaParseError(
                self.formula,
                f"unknown function {name_token.text!r}. "
                f"Supported functions: {', '.join(sorted(_FUNCTION_ARITY))}",
                name_token.position,
            )
        self._expect("lparen", "'('")
        self._descend(name_token)

        arguments: list[FormulaNode] = []
        if self._peek().kind != "rparen":
            arguments.append(self._parse_comparison())
            while self._peek().kind == "comma":
                self._advance()
                arguments.append(self._parse_comparison())
        self._expect("rparen", "')' or ','")
        self.depth -= 1

        minimum, maximum = _FUNCTION_ARITY[function]
        if len(arguments) < minimum or (maximum is not None and len(arguments) > maximum):
            expected = str(minimum) if minimum == maximum else (
                f"at least {minimum}" if maximum is None else f"{minimum}-{maximum}"
            )
            raise FormulaParseError(
                self.formula,
                f"{function} expects {expected} argument(s), got {len(arguments)}",
                name_token.position,
            )
        return Call(function, tuple(arguments))



def _children(node: FormulaNode) -> tuple[FormulaNode, ...]:
    if isinstance(node, Unary):
        return (node.operand,)
    if isinstance(node, Binary):
        return (node.left, node.right)
    if isinstance(node, Call):
        return node.arguments
    return ()

@lru_cache(maxsize=256)
def parse_formula(formula: str) -> FormulaNode:
    """
    Parse a formula into an expression tree.

    Params:
        formula: Formula text starting with '='

    Returns:
        Root FormulaNode

    Raises:
        FormulaParseError: If the formula is malformed
    """
    return FormulaParser(formula).parse()


def is_truthy(value: Any) -> bool:
    """Truthiness shared by formulas and conditional props.

    Blank and empty values are false, numbers are true when non-zero, and the
    text "false" (any case) is false.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        stripped = value.strip()
        return stripped != "" and stripped.casefold() != "false"
    if isinstance(value, (list, tuple, dict, set)):
        return len(value) > 0
    return bool(value)


def _to_number(value: Any) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return None
    return None


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _compare(op: str, left: Any, right: Any) -> bool:
    left_number, right_number = _to_number(left), _to_number(right)

    # Blank participates as 0 against a number and as "" against text
    if left is None and right_number is not None:
        left_number = 0.0
    if right is None and left_number is not None:
        right_number = 0.0

    if left_number is not None and right_number is not None:
        return _COMPARATORS[op](left_number, right_number)
    return _COMPARATORS[op](_to_text(left).casefold(), _to_text(right).casefold())


def _arithmetic_operand(value: Any) -> float:
    if value is None:
        return 0.0
    number = _to_number(value)
    if number is None:
        raise _EvaluationFault(f"#VALUE! cannot use {value!r} as a number")
    return number


def _evaluate(node: FormulaNode, inputs: Mapping[str, Any]) -> Any:
    if isinstance(node, Literal):
        return node.value

    if isinstance(node, Identifier):
        return inputs.get(node.name)

    if isinstance(node, Unary):
        return -_arithmetic_operand(_evaluate(node.operand, inputs))

    if isinstance(node, Binary):
        left = _evaluate(node.left, inputs)
        right = _evaluate(node.right, inputs)
        if node.op in _COMPARATORS:
            return _compare(node.op, left, right)
        if node.op == "&":
            return _to_text(left) + _to_text(right)
        a, b = _arithmetic_operand(left), _arithmetic_operand(right)
        if node.op == "+":
            return a + b
        if node.op == "-":
            return a - b
        if node.op == "*":
            return a * b
        if b == 0:
            raise _EvaluationFault("#DIV/0!")
        return a / b

    if isinstance(node, Call):
        return _call(node, inputs)

    raise TypeError(f"Unknown formula node: {node!r}")


def _call(node: Call, inputs: Mapping[str, Any]) -> Any:
    args = node.arguments
    if node.function == "AND":
        return all([is_truthy(_evaluate(arg, inputs)) for arg in args])
    if node.function == "OR":
        return any([is_truthy(_evaluate(arg, inputs)) for arg in args])
    if node.function == "NOT":
        return not is_truthy(_evaluate(args[0], inputs))
    if node.function == "IF":
        if is_truthy(_evaluate(args[0], inputs)):
            return _evaluate(args[1], inputs)
        return _evaluate(args[2], inputs) if len(args) == 3 else False
    if node.function == "ISBLANK":
        value = _evaluate(args[0], inputs)
        return value is None or value == ""
    if node.function == "LEN":
        return float(len(_to_text(_evaluate(args[0], inputs))))
    if node.function == "TRUE":
        return True
    return False


def evaluate_formula(formula: str, inputs: Mapping[str, Any]) -> bool:
    """
    Evaluate a formula against the inputs mapping.

    Strings without a leading '=' are not formulas and are checked for
    truthiness instead.

    Params:
        formula: Formula text (e.g. "=count>5")
        inputs: Mapping of input names to values

    Returns:
        Boolean result of the formula

    Raises:
        FormulaParseError: If the formula is malformed
    """
    if not formula.startswith("="):
        return is_truthy(formula)

    tree = parse_formula(formula)
    try:
        result = _evaluate(tree, inputs)
    except _EvaluationFault as fault:
        logger.debug("Formula %r evaluated to an error value: %s", formula, fault)
        return False
    return is_truthy(result)


def evaluate_condition(when: Any, inputs: Mapping[str, Any]) -> bool:
    """Evaluate a conditional prop that is either a literal or a formula string."""
    if isinstance(when, str):
        return evaluate_formula(when, inputs)
    return is_truthy(when)
