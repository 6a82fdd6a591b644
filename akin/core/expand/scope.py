from __future__ import annotations

from typing import Iterator, Mapping

from akin.core.errors import undeclared
from akin.core.model import Block, StringTemplate, Variable, VariableRef


def direct_names(block: Block) -> list[str]:
    """Distinct directly-referenced names, in first-use order."""
    seen: dict[str, None] = {}
    for ref in _iter_direct_refs(block):
        seen.setdefault(ref.name, None)
    return list(seen)


def duplication_factor(block: Block, table: Mapping[str, Variable]) -> int:
    """max(1, largest value count among directly referenced variables)."""
    factor = 1
    for ref in _iter_direct_refs(block):
        var = table.get(ref.name)
        if var is None:
            raise undeclared(ref.name, ref.span)
        factor = max(factor, len(var.values))
    return factor


def count_blocks(block: Block) -> int:
    """Number of blocks in the tree, `block` included."""
    return 1 + sum(count_blocks(n) for n in block.nodes if isinstance(n, Block))


def _iter_direct_refs(block: Block) -> Iterator[VariableRef]:
    for node in block.nodes:
        if isinstance(node, VariableRef):
            yield node
        elif isinstance(node, StringTemplate):
            for part in node.parts:
                if isinstance(part, VariableRef):
                    yield part
