from __future__ import annotations

from dataclasses import replace
from typing import Mapping, Optional

from akin.core.config.settings import Settings
from akin.core.errors import undeclared
from akin.core.expand.scope import direct_names, duplication_factor
from akin.core.log import logger
from akin.core.model import Block, StringTemplate, Token, Variable, VariableRef
from akin.core.render.serialize import serialize


Copy = tuple[Token, ...]


def expand_block(
    block: Block,
    table: Mapping[str, Variable],
    settings: Optional[Settings] = None,
) -> list[Copy]:
    """Return `factor` substituted copies of the block's content.

    Behaviors:

    - factor is computed from the block's own references only
      (see scope.duplication_factor).
    - copy i substitutes value min(i, len - 1) of every referenced variable
      (clamp-last); an empty value contributes no tokens.
    - each child block is expanded once, independently, and the same copies
      are spliced between the child's delimiters in every copy of this block.

    Delimiters of `block` itself are not part of the copies; the parent emits
    them once around the spliced copies.
    """
    settings = settings or Settings()
    factor = duplication_factor(block, table)
    if factor > 1:
        logger.debug("block factor={} refs={}", factor, direct_names(block))

    children: dict[int, Copy] = {}
    for idx, node in enumerate(block.nodes):
        if isinstance(node, Block):
            children[idx] = _splice(node, expand_block(node, table, settings))

    copies: list[Copy] = []
    for i in range(factor):
        out: list[Token] = []
        for idx, node in enumerate(block.nodes):
            if isinstance(node, Token):
                out.append(node)
            elif isinstance(node, VariableRef):
                out.extend(_substitute(node, table, i))
            elif isinstance(node, StringTemplate):
                out.append(_substitute_string(node, table, i, settings))
            else:
                out.extend(children[idx])
        copies.append(tuple(out))
    return copies


def _splice(child: Block, copies: list[Copy]) -> Copy:
    out: list[Token] = []
    if child.open is not None:
        out.append(child.open)
    for c in copies:
        out.extend(c)
    if child.close is not None:
        out.append(child.close)
    return tuple(out)


def _lookup(ref: VariableRef, table: Mapping[str, Variable]) -> Variable:
    var = table.get(ref.name)
    if var is None:
        raise undeclared(ref.name, ref.span)
    return var


def _substitute(ref: VariableRef, table: Mapping[str, Variable], i: int) -> Copy:
    value = _lookup(ref, table).value_at(i)
    if not value:
        return ()
    first = value[0]
    if first.joint != ref.joint:
        first = replace(first, joint=ref.joint)
    return (first,) + value[1:]


def _substitute_string(node: StringTemplate, table: Mapping[str, Variable], i: int, settings: Settings) -> Token:
    pieces: list[str] = []
    for part in node.parts:
        if isinstance(part, VariableRef):
            pieces.append(_string_piece(_lookup(part, table).value_at(i), settings))
        else:
            pieces.append(part)
    return replace(node.token, text="".join(pieces))


def _string_piece(value: Copy, settings: Settings) -> str:
    # a plain "..." value contributes its contents, not a nested literal
    if len(value) == 1 and value[0].is_string and value[0].text.startswith('"'):
        return value[0].text[1:-1]
    return serialize(value, settings)
