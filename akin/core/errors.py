from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Span:
    """Half-open character range in the template text, plus its 1-based line/column."""

    start: int
    end: int
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


@dataclass(frozen=True)
class AkinError(Exception):
    """Base error envelope. Exactly one of these replaces the output of a failed render."""

    code: str
    message: str
    file: Optional[str] = None
    span: Optional[Span] = None

    @property
    def kind(self) -> str:
        return type(self).__name__

    def __str__(self) -> str:
        parts: list[str] = []
        if self.file:
            parts.append(self.file)
        if self.span:
            parts.append(str(self.span))
        loc = ":".join(parts) if parts else "<template>"
        return f"{loc}: {self.code}: {self.message}"

    def with_file(self, file: Optional[str]) -> AkinError:
        if not file or self.file:
            return self
        return type(self)(code=self.code, message=self.message, file=file, span=self.span)


class AkinSyntaxError(AkinError):
    pass


class DuplicateDeclarationError(AkinError):
    pass


class UndeclaredVariableError(AkinError):
    pass


class TypeMismatchError(AkinError):
    pass


class TemplateLoadError(AkinError):
    pass


def syntax_error(message: str, span: Optional[Span] = None) -> AkinSyntaxError:
    return AkinSyntaxError(code="E_SYNTAX", message=message, span=span)


def undeclared(name: str, span: Optional[Span] = None) -> UndeclaredVariableError:
    return UndeclaredVariableError(
        code="E_UNDECLARED_VARIABLE",
        message=f"reference to undeclared variable: {name}",
        span=span,
    )
