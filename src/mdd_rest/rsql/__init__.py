"""RSQL filter support: parser, syntax tree and query builder."""

from .ast import AndNode, ComparisonNode, Node, OrNode
from .builder import RsqlQueryBuilder
from .parser import RsqlParser, parse

__all__ = [
    "AndNode",
    "ComparisonNode",
    "Node",
    "OrNode",
    "RsqlParser",
    "RsqlQueryBuilder",
    "parse",
]
