from __future__ import annotations

from typing import Mapping, Optional, Sequence, Union

from akin.core.config.settings import Settings
from akin.core.errors import Span, syntax_error, undeclared
from akin.core.log import logger
from akin.core.model import CLOSING, Block, Node, StringTemplate, Token, TokenKind, Variable, VariableRef


def parse_body(
    tokens: Sequence[Token],
    table: Mapping[str, Variable],
    settings: Optional[Settings] = None,
) -> Block:
    """Build the Block tree for a flat token sequence.

    Nesting is tracked with an explicit stack of open groups rather than
    recursion. Every `*name` must already be declared in `table`; the first
    undeclared reference (in source order) fails.
    """
    settings = settings or Settings()

    # Each frame: (opening token, nodes collected so far).
    stack: list[tuple[Optional[Token], list[Node]]] = [(None, [])]
    i = 0
    n = len(tokens)

    while i < n:
        tok = tokens[i]
        nodes = stack[-1][1]

        if tok.kind is TokenKind.OPEN:
            stack.append((tok, []))
            i += 1
            continue

        if tok.kind is TokenKind.CLOSE:
            open_tok = stack[-1][0]
            if open_tok is None:
                raise syntax_error(f"unexpected closing delimiter '{tok.text}'", tok.span)
            if CLOSING[open_tok.text] != tok.text:
                raise syntax_error(
                    f"mismatched delimiter: '{open_tok.text}' at {open_tok.span} closed by '{tok.text}'",
                    tok.span,
                )
            _, child_nodes = stack.pop()
            stack[-1][1].append(Block(nodes=tuple(child_nodes), open=open_tok, close=tok))
            i += 1
            continue

        if tok.is_punct(settings.ref_marker) and i + 1 < n:
            nxt = tokens[i + 1]
            if nxt.kind is TokenKind.IDENT and not nxt.spaced and not nxt.joint:
                if nxt.text not in table:
                    raise undeclared(nxt.text, _join_spans(tok.span, nxt.span))
                nodes.append(VariableRef(name=nxt.text, span=_join_spans(tok.span, nxt.span), joint=tok.joint))
                i += 2
                continue

        if tok.is_string and settings.interpolate_strings:
            nodes.append(interpolate(tok, table, settings))
        else:
            nodes.append(tok)
        i += 1

    if len(stack) > 1:
        open_tok = stack[-1][0]
        assert open_tok is not None
        raise syntax_error(f"unclosed delimiter '{open_tok.text}'", open_tok.span)

    body = Block(nodes=tuple(stack[0][1]))
    logger.debug("parsed body: {} top-level nodes", len(body.nodes))
    return body


def interpolate(tok: Token, table: Mapping[str, Variable], settings: Settings) -> Union[Token, StringTemplate]:
    """Split a string literal around `*name` references to declared variables.

    Returns the token unchanged when it embeds no such reference. Char and
    byte-char literals are never interpolated.
    """
    text = tok.text
    if text.startswith(("'", "b'")):
        return tok

    marker = settings.ref_marker
    parts: list[Union[str, VariableRef]] = []
    last = 0
    k = text.find(marker)
    while k >= 0:
        end = k + 1
        while end < len(text) and (text[end].isalnum() or text[end] == "_"):
            end += 1
        name = text[k + 1 : end]
        if name in table:
            if k > last:
                parts.append(text[last:k])
            parts.append(VariableRef(name=name, span=_inner_span(tok, k, end)))
            last = end
        k = text.find(marker, max(end, k + 1))

    if not parts:
        return tok
    if last < len(text):
        parts.append(text[last:])
    return StringTemplate(token=tok, parts=tuple(parts))


def _join_spans(a: Span, b: Span) -> Span:
    return Span(start=a.start, end=b.end, line=a.line, column=a.column)


def _inner_span(tok: Token, start: int, end: int) -> Span:
    prefix = tok.text[:start]
    newlines = prefix.count("\n")
    if newlines:
        column = start - prefix.rfind("\n")
    else:
        column = tok.span.column + start
    return Span(
        start=tok.span.start + start,
        end=tok.span.start + end,
        line=tok.span.line + newlines,
        column=column,
    )
