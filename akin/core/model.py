from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Mapping, Optional, Union

from akin.core.errors import Span


class TokenKind(str, Enum):
    IDENT = "ident"
    LITERAL = "literal"
    PUNCT = "punct"
    OPEN = "open"
    CLOSE = "close"


CLOSING: dict[str, str] = {"(": ")", "[": "]", "{": "}"}


@dataclass(frozen=True)
class Token:
    kind: TokenKind
    text: str
    span: Span
    joint: bool = False
    spaced: bool = False  # whitespace preceded the token in the source
    is_string: bool = False

    def is_punct(self, text: str) -> bool:
        return self.kind is TokenKind.PUNCT and self.text == text

    def is_ident(self, text: str) -> bool:
        return self.kind is TokenKind.IDENT and self.text == text


Value = tuple[Token, ...]


@dataclass(frozen=True)
class Variable:
    name: str
    values: tuple[Value, ...]
    span: Span

    def __len__(self) -> int:
        return len(self.values)

    def value_at(self, i: int) -> Value:
        # clamp-last
        return self.values[min(i, len(self.values) - 1)]


class VariableTable(Mapping[str, Variable]):
    """Read-only name -> Variable mapping, in declaration order."""

    def __init__(self, variables: Optional[Mapping[str, Variable]] = None) -> None:
        self._vars: dict[str, Variable] = dict(variables or {})

    def __getitem__(self, name: str) -> Variable:
        return self._vars[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"VariableTable({list(self._vars)})"


@dataclass(frozen=True)
class VariableRef:
    name: str
    span: Span
    joint: bool = False


@dataclass(frozen=True)
class StringTemplate:
    """A string literal whose text embeds references to declared variables."""

    token: Token
    parts: tuple[Union[str, VariableRef], ...]


@dataclass(frozen=True)
class Block:
    """A scope. `open`/`close` are set for child blocks delimited by a bracket pair."""

    nodes: tuple[Node, ...] = field(default_factory=tuple)
    open: Optional[Token] = None
    close: Optional[Token] = None


Node = Union[Token, VariableRef, StringTemplate, Block]
