from __future__ import annotations

from typing import Optional

from akin.core.config.settings import Settings
from akin.core.errors import AkinError
from akin.core.expand.expand_block import expand_block
from akin.core.expand.scope import count_blocks, duplication_factor
from akin.core.lex.tokenize import tokenize
from akin.core.log import logger
from akin.core.model import Block, VariableTable
from akin.core.parse.body import parse_body
from akin.core.parse.declarations import parse_declarations
from akin.core.render.serialize import serialize


def parse(
    text: str,
    settings: Optional[Settings] = None,
    *,
    file: Optional[str] = None,
) -> tuple[VariableTable, Block]:
    """Tokenize and parse a template into (variable table, body block).

    Raises the first AkinError found in source order; `file` is attached to
    it for diagnostics. The whole text is tokenized first, so a lexical
    error anywhere wins over an earlier declaration or body error.
    """
    settings = settings or Settings()
    try:
        tokens = tokenize(text, settings)
        logger.debug("tokenized {} chars into {} tokens", len(text), len(tokens))
        table, body_start = parse_declarations(tokens, settings)
        body = parse_body(tokens[body_start:], table, settings)
    except AkinError as e:
        raise e.with_file(file) from None
    return table, body


def expand_and_render(
    table: VariableTable,
    body: Block,
    settings: Optional[Settings] = None,
) -> str:
    settings = settings or Settings()
    copies = expand_block(body, table, settings)
    return serialize((tok for c in copies for tok in c), settings)


def render(
    text: str,
    settings: Optional[Settings] = None,
    *,
    file: Optional[str] = None,
) -> str:
    """Expand a whole template. Either returns the full output or raises; never partial."""
    table, body = parse(text, settings, file=file)
    try:
        return expand_and_render(table, body, settings)
    except AkinError as e:
        raise e.with_file(file) from None


def summarize_template(table: VariableTable, body: Block) -> str:
    parts = [f"{name}={len(var.values)}" for name, var in table.items()]
    return (
        f"OK: {len(table)} variables ("
        + ", ".join(parts)
        + f")\nBlocks: {count_blocks(body)}, body factor: {duplication_factor(body, table)}"
    )
