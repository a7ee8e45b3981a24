"""Expression tree produced by the parser."""

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Atom:
    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class List:
    items: tuple["Expression", ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def __str__(self) -> str:
        return "(" + " ".join(str(item) for item in self.items) + ")"


@dataclass(frozen=True)
class DottedList:
    """Improper list: ``(a b . c)`` is ``DottedList((a, b), c)``."""

    items: tuple["Expression", ...]
    tail: "Expression"

    def __post_init__(self):
        object.__setattr__(self, "items", tuple(self.items))

    def __str__(self) -> str:
        head = " ".join(str(item) for item in self.items)
        return f"({head} . {self.tail})"


@dataclass(frozen=True)
class Number:
    value: int

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class String:
    value: str

    def __str__(self) -> str:
        return f'"{self.value}"'


@dataclass(frozen=True)
class Boolean:
    value: bool

    def __str__(self) -> str:
        return "#t" if self.value else "#f"


Expression = Union[Atom, List, DottedList, Number, String, Boolean]


def to_source(expr: Expression) -> str:
    """Render an expression back to canonical source text.

    Quote sugar is not restored: ``'x`` prints as ``(quote x)``.
    """
    return str(expr)
