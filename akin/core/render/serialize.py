from __future__ import annotations

from typing import Iterable, Optional

from akin.core.config.settings import Settings
from akin.core.model import Token


def serialize(tokens: Iterable[Token], settings: Optional[Settings] = None) -> str:
    """Join tokens with the separator, except before joint tokens.

    Token texts (string literals included) are emitted verbatim. Only emitted
    tokens are separated, so empty substitutions never leave a double or a
    leading/trailing separator.
    """
    sep = (settings or Settings()).separator
    parts: list[str] = []
    for tok in tokens:
        if parts and not tok.joint:
            parts.append(sep)
        parts.append(tok.text)
    return "".join(parts)
