"""Compile-time template expansion: declare multi-valued slots, write the body once."""

from akin.core.config.settings import Settings, load_and_merge
from akin.core.engine import expand_and_render, parse, render, summarize_template
from akin.core.errors import (
    AkinError,
    AkinSyntaxError,
    DuplicateDeclarationError,
    TypeMismatchError,
    UndeclaredVariableError,
)
from akin.core.lex.tokenize import tokenize

__version__ = "0.1.0"

__all__ = [
    "AkinError",
    "AkinSyntaxError",
    "DuplicateDeclarationError",
    "Settings",
    "TypeMismatchError",
    "UndeclaredVariableError",
    "expand_and_render",
    "load_and_merge",
    "parse",
    "render",
    "summarize_template",
    "tokenize",
]
