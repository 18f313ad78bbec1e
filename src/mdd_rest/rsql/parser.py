"""Recursive descent parser for RSQL/FIQL filter expressions.

Grammar::

    or          := and ( ( "," | " or " ) and )*
    and         := constraint ( ( ";" | " and " ) constraint )*
    constraint  := "(" or ")" | comparison
    comparison  := selector operator arguments
    operator    := "==" | "!=" | "<" | "<=" | ">" | ">=" | "=" [a-z-]* "="
    arguments   := "(" value ( "," value )* ")" | value
    value       := unreserved+ | "'" chars "'" | '"' chars '"'

AND binds tighter than OR; parentheses override precedence.
"""

import re

from mdd_rest.exceptions import BadRequestError, RsqlSyntaxError
from mdd_rest.specification import Operator

from .ast import AndNode, ComparisonNode, Node, OrNode

_SELECTOR_RESERVED = frozenset("=!~<>();,'\"")
_VALUE_RESERVED = frozenset("();,'\"")
_FIQL_OPERATOR = re.compile(r"=[a-zA-Z-]*=")
_SYMBOL_OPERATORS = ("==", "!=", "<=", ">=", "<", ">")


class RsqlParser:
    """Parses one RSQL expression into a syntax tree.

    Example:
        ```python
        node = RsqlParser("title==Dune*;(year=gt=1960,author.name==Herbert)").parse()
        ```
    """

    def __init__(self, query: str) -> None:
        self._query = query
        self._pos = 0

    def parse(self) -> Node:
        """Parse the whole expression.

        Returns:
            The root node

        Raises:
            RsqlSyntaxError: If the expression is malformed
        """
        if not self._query or not self._query.strip():
            raise RsqlSyntaxError("Empty filter", self._query, 0)

        node = self._or()
        self._skip_whitespace()
        if not self._at_end():
            self._fail(f"Unexpected character {self._peek()!r}")
        return node

    def _or(self) -> Node:
        nodes = [self._and()]
        while self._accept_logical(",", "or"):
            nodes.append(self._and())
        return nodes[0] if len(nodes) == 1 else OrNode(tuple(nodes))

    def _and(self) -> Node:
        nodes = [self._constraint()]
        while self._accept_logical(";", "and"):
            nodes.append(self._constraint())
        return nodes[0] if len(nodes) == 1 else AndNode(tuple(nodes))

    def _constraint(self) -> Node:
        self._skip_whitespace()
        if self._peek() == "(":
            self._pos += 1
            node = self._or()
            self._skip_whitespace()
            self._expect(")")
            return node
        return self._comparison()

    def _comparison(self) -> ComparisonNode:
        selector = self._selector()
        self._skip_whitespace()
        operator = self._operator()
        self._skip_whitespace()
        arguments = self._arguments()
        return ComparisonNode(selector=selector, operator=operator, arguments=tuple(arguments))

    def _selector(self) -> str:
        start = self._pos
        while not self._at_end():
            char = self._peek()
            if char in _SELECTOR_RESERVED or char.isspace():
                break
            self._pos += 1
        if self._pos == start:
            self._fail("Expected selector")
        return self._query[start : self._pos]

    def _operator(self) -> str:
        match = _FIQL_OPERATOR.match(self._query, self._pos)
        if match and match.group() != "==":
            symbol = match.group()
        else:
            symbol = next((s for s in _SYMBOL_OPERATORS if self._query.startswith(s, self._pos)), None)
            if symbol is None:
                self._fail("Expected comparison operator")

        try:
            operator = Operator.parse(symbol)
        except BadRequestError:
            self._fail(f"Unknown comparison operator {symbol!r}")
        self._pos += len(symbol)
        return operator.value

    def _arguments(self) -> list[str]:
        if self._peek() != "(":
            return [self._value()]

        self._pos += 1
        values = [self._value()]
        self._skip_whitespace()
        while self._peek() == ",":
            self._pos += 1
            values.append(self._value())
            self._skip_whitespace()
        self._expect(")")
        return values

    def _value(self) -> str:
        self._skip_whitespace()
        quote = self._peek()
        if quote in ("'", '"'):
            return self._quoted(quote)

        start = self._pos
        while not self._at_end():
            char = self._peek()
            if char in _VALUE_RESERVED or char.isspace():
                break
            self._pos += 1
        if self._pos == start:
            self._fail("Expected argument")
        return self._query[start : self._pos]

    def _quoted(self, quote: str) -> str:
        start = self._pos
        self._pos += 1
        chars: list[str] = []
        while not self._at_end():
            char = self._peek()
            if char == "\\" and self._pos + 1 < len(self._query):
                chars.append(self._query[self._pos + 1])
                self._pos += 2
                continue
            if char == quote:
                self._pos += 1
                return "".join(chars)
            chars.append(char)
            self._pos += 1
        raise RsqlSyntaxError("Unterminated quoted argument", self._query, start)

    def _accept_logical(self, symbol: str, keyword: str) -> bool:
        start = self._pos
        self._skip_whitespace()
        if self._peek() == symbol:
            self._pos += 1
            return True

        had_space = self._pos > start
        end = self._pos + len(keyword)
        if (
            had_space
            and self._query[self._pos : end].lower() == keyword
            and end < len(self._query)
            and self._query[end].isspace()
        ):
            self._pos = end
            return True

        self._pos = start
        return False

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._query[self._pos].isspace():
            self._pos += 1

    def _expect(self, char: str) -> None:
        if self._peek() != char:
            found = repr(self._peek()) if not self._at_end() else "end of input"
            self._fail(f"Expected {char!r} but found {found}")
        self._pos += 1

    def _peek(self) -> str:
        return self._query[self._pos] if self._pos < len(self._query) else ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._query)

    def _fail(self, message: str):
        raise RsqlSyntaxError(message, self._query, self._pos)


def parse(query: str) -> Node:
    """Parse an RSQL expression into a syntax tree."""
    return RsqlParser(query).parse()
