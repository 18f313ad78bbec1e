"""RSQL syntax tree."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ComparisonNode:
    """``selector operator arguments``, e.g. ``title=in=(Dune,Emma)``."""

    selector: str
    operator: str
    arguments: tuple[str, ...]

    def __str__(self) -> str:
        if len(self.arguments) == 1:
            return f"{self.selector}{self.operator}{_quote(self.arguments[0])}"
        return f"{self.selector}{self.operator}({','.join(_quote(a) for a in self.arguments)})"


@dataclass(frozen=True)
class AndNode:
    children: tuple["Node", ...]

    def __str__(self) -> str:
        return ";".join(_group(child, OrNode) for child in self.children)


@dataclass(frozen=True)
class OrNode:
    children: tuple["Node", ...]

    def __str__(self) -> str:
        return ",".join(str(child) for child in self.children)


Node = ComparisonNode | AndNode | OrNode

_RESERVED = set("()[];,'\" \t\r\n")


def _quote(value: str) -> str:
    if value and not any(char in _RESERVED for char in value):
        return value
    escaped = value.replace("\\", "\\\\").replace("'", "\\'")
    return f"'{escaped}'"


def _group(node: Node, grouped_type: type) -> str:
    text = str(node)
    return f"({text})" if isinstance(node, grouped_type) else text
