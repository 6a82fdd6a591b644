from __future__ import annotations

from typing import Optional, Sequence

from akin.core.config.settings import Settings
from akin.core.errors import DuplicateDeclarationError, Span, TypeMismatchError, syntax_error
from akin.core.expand.expand_block import expand_block
from akin.core.log import logger
from akin.core.model import CLOSING, Token, TokenKind, Value, Variable, VariableTable
from akin.core.parse.body import parse_body


U64_MAX = 2**64 - 1
RANGE_OPERATORS = ("..", "..=")


def parse_declarations(
    tokens: Sequence[Token],
    settings: Optional[Settings] = None,
) -> tuple[VariableTable, int]:
    """Consume the `let &name = ...;` prefix.

    Returns (table, index of the first body token). The prefix ends at the
    first position that does not start with `<decl_keyword> <decl_sigil>`.

    Value sources:
      [v, ...]   one value per top-level item; `{...}` items are unwrapped
      a..b       a, ..., b-1
      a..=b      a, ..., b
      NONE       a single empty value
      {...}      a single value: the content expanded against the
                 variables declared so far
    """
    settings = settings or Settings()
    variables: dict[str, Variable] = {}
    i = 0

    while _at_declaration(tokens, i, settings):
        let_tok = tokens[i]
        i += 2

        name_tok = _expect(tokens, i, let_tok, "variable name")
        if name_tok.kind is not TokenKind.IDENT:
            raise syntax_error(f"expected variable name, found '{name_tok.text}'", name_tok.span)
        if name_tok.text in variables:
            prev = variables[name_tok.text]
            raise DuplicateDeclarationError(
                code="E_DUPLICATE_DECLARATION",
                message=f"variable '{name_tok.text}' already declared at {prev.span}",
                span=name_tok.span,
            )
        i += 1

        eq_tok = _expect(tokens, i, name_tok, "'='")
        if not eq_tok.is_punct("="):
            raise syntax_error(f"expected '=' after '{name_tok.text}', found '{eq_tok.text}'", eq_tok.span)
        i += 1

        values, i = _parse_value_source(tokens, i, eq_tok, variables, settings)

        semi = _expect(tokens, i, tokens[i - 1], "';'")
        if not semi.is_punct(";"):
            raise syntax_error(f"expected ';' after declaration of '{name_tok.text}'", semi.span)
        i += 1

        variables[name_tok.text] = Variable(name=name_tok.text, values=tuple(values), span=name_tok.span)
        logger.debug("declared {}: {} value(s)", name_tok.text, len(values))

    return VariableTable(variables), i


def _at_declaration(tokens: Sequence[Token], i: int, settings: Settings) -> bool:
    return (
        i + 1 < len(tokens)
        and tokens[i].is_ident(settings.decl_keyword)
        and tokens[i + 1].is_punct(settings.decl_sigil)
    )


def _expect(tokens: Sequence[Token], i: int, after: Token, what: str) -> Token:
    if i >= len(tokens):
        raise syntax_error(f"expected {what}, found end of input", _end_span(after))
    return tokens[i]


def _parse_value_source(
    tokens: Sequence[Token],
    i: int,
    eq_tok: Token,
    variables: dict[str, Variable],
    settings: Settings,
) -> tuple[list[Value], int]:
    tok = _expect(tokens, i, eq_tok, "a value list, a block, a range or " + settings.none_marker)

    if (
        tok.kind in (TokenKind.LITERAL, TokenKind.IDENT)
        and i + 1 < len(tokens)
        and tokens[i + 1].kind is TokenKind.PUNCT
        and tokens[i + 1].text in RANGE_OPERATORS
    ):
        return _parse_range(tokens, i, settings)

    if tok.is_ident(settings.none_marker):
        return [()], i + 1

    if tok.kind is TokenKind.OPEN and tok.text == "[":
        end = _group_end(tokens, i)
        values = _parse_value_list(tokens[i + 1 : end], tok, settings)
        return values, end + 1

    if tok.kind is TokenKind.OPEN and tok.text == "{":
        end = _group_end(tokens, i)
        content = tokens[i + 1 : end]
        block = parse_body(content, VariableTable(variables), settings)
        copies = expand_block(block, variables, settings)
        value: Value = tuple(t for c in copies for t in c)
        return [value], end + 1

    raise syntax_error(
        f"expected '[', '{{', a range or {settings.none_marker}, found '{tok.text}'",
        tok.span,
    )


def _parse_value_list(content: Sequence[Token], open_tok: Token, settings: Settings) -> list[Value]:
    items: list[list[Token]] = [[]]
    commas: list[Token] = []
    depth = 0
    for tok in content:
        if tok.kind is TokenKind.OPEN:
            depth += 1
        elif tok.kind is TokenKind.CLOSE:
            depth -= 1
        if depth == 0 and tok.is_punct(","):
            items.append([])
            commas.append(tok)
            continue
        items[-1].append(tok)

    # allow one trailing comma
    if len(items) > 1 and not items[-1]:
        items.pop()

    if items == [[]]:
        raise syntax_error("value list must not be empty", open_tok.span)

    values: list[Value] = []
    for idx, item in enumerate(items):
        if not item:
            at = commas[idx] if idx < len(commas) else open_tok
            raise syntax_error("empty value in list (use " + settings.none_marker + " for an empty value)", at.span)
        values.append(_parse_list_item(item, settings))
    return values


def _parse_list_item(item: list[Token], settings: Settings) -> Value:
    first = item[0]
    if len(item) == 1:
        if first.is_ident(settings.none_marker):
            return ()
        return (first,)

    if first.kind is TokenKind.OPEN and _group_end(item, 0) == len(item) - 1:
        if first.text == "{":
            return tuple(item[1:-1])
        return tuple(item)

    raise syntax_error("multi-token values must be wrapped in {...}", first.span)


def _parse_range(tokens: Sequence[Token], i: int, settings: Settings) -> tuple[list[Value], int]:
    low_tok = tokens[i]
    op_tok = tokens[i + 1]
    high_tok = _expect(tokens, i + 2, op_tok, "range upper bound")
    if high_tok.kind not in (TokenKind.LITERAL, TokenKind.IDENT):
        raise syntax_error(f"expected range upper bound, found '{high_tok.text}'", high_tok.span)

    low = _parse_u64(low_tok)
    high = _parse_u64(high_tok)
    inclusive = op_tok.text == "..="
    stop = high + 1 if inclusive else high
    span = Span(start=low_tok.span.start, end=high_tok.span.end, line=low_tok.span.line, column=low_tok.span.column)

    if high < low:
        raise TypeMismatchError(
            code="E_TYPE_MISMATCH",
            message=f"descending range: {low_tok.text}{op_tok.text}{high_tok.text}",
            span=span,
        )
    if stop == low:
        raise TypeMismatchError(
            code="E_TYPE_MISMATCH",
            message=f"empty range: {low_tok.text}{op_tok.text}{high_tok.text}",
            span=span,
        )
    if stop - low > settings.max_range_values:
        raise TypeMismatchError(
            code="E_TYPE_MISMATCH",
            message=f"range yields {stop - low} values (max_range_values={settings.max_range_values})",
            span=span,
        )

    values: list[Value] = [
        (Token(kind=TokenKind.LITERAL, text=str(v), span=span, spaced=True),) for v in range(low, stop)
    ]
    return values, i + 3


def _parse_u64(tok: Token) -> int:
    text = tok.text.replace("_", "")
    if tok.kind is not TokenKind.LITERAL or not text.isdigit() or not text.isascii():
        raise TypeMismatchError(
            code="E_TYPE_MISMATCH",
            message=f"range bound must be an unsigned 64-bit integer, found '{tok.text}'",
            span=tok.span,
        )
    value = int(text)
    if value > U64_MAX:
        raise TypeMismatchError(
            code="E_TYPE_MISMATCH",
            message=f"range bound does not fit in 64 bits: {tok.text}",
            span=tok.span,
        )
    return value


def _group_end(tokens: Sequence[Token], i: int) -> int:
    """Index of the token closing the group opened at tokens[i]."""
    stack: list[Token] = []
    for k in range(i, len(tokens)):
        tok = tokens[k]
        if tok.kind is TokenKind.OPEN:
            stack.append(tok)
        elif tok.kind is TokenKind.CLOSE:
            if not stack:
                raise syntax_error(f"unexpected closing delimiter '{tok.text}'", tok.span)
            open_tok = stack.pop()
            if CLOSING[open_tok.text] != tok.text:
                raise syntax_error(
                    f"mismatched delimiter: '{open_tok.text}' at {open_tok.span} closed by '{tok.text}'",
                    tok.span,
                )
            if not stack:
                return k
    raise syntax_error(f"unclosed delimiter '{tokens[i].text}'", tokens[i].span)


def _end_span(tok: Token) -> Span:
    return Span(start=tok.span.end, end=tok.span.end, line=tok.span.line, column=tok.span.column + len(tok.text))
