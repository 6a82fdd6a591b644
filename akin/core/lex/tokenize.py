from __future__ import annotations

import bisect
from typing import Optional

from akin.core.config.settings import Settings
from akin.core.errors import Span, syntax_error
from akin.core.model import CLOSING, Token, TokenKind


# Longest first; maximal munch.
OPERATORS: tuple[str, ...] = (
    "..=", "...", "<<=", ">>=",
    "::", "->", "=>", "==", "!=", "<=", ">=", "&&", "||",
    "+=", "-=", "*=", "/=", "%=", "^=", "&=", "|=", "<<", ">>", "..",
)

_OPEN = set(CLOSING.keys())
_CLOSE = set(CLOSING.values())
_STRING_PREFIXES = ("br", "cr", "b", "c", "r")


def _is_word_start(text: str, i: int) -> bool:
    return i < len(text) and (text[i].isalpha() or text[i] == "_")


def tokenize(text: str, settings: Optional[Settings] = None) -> list[Token]:
    """Split template text into tokens.

    Pure: no state survives the call. Comments and whitespace produce no
    tokens; whitespace is recorded as `spaced` on the following token and the
    joint marker as `joint`.
    """
    return _Lexer(text, settings or Settings()).run()


class _Lexer:
    def __init__(self, text: str, settings: Settings) -> None:
        self.text = text
        self.settings = settings
        self.pos = 0
        self.tokens: list[Token] = []
        self._line_starts = [0] + [i + 1 for i, ch in enumerate(text) if ch == "\n"]

    def run(self) -> list[Token]:
        text = self.text
        spaced = False
        joint = False
        n = len(text)

        while self.pos < n:
            ch = text[self.pos]

            if ch.isspace():
                spaced = True
                self.pos += 1
                continue

            if text.startswith("//", self.pos):
                end = text.find("\n", self.pos)
                self.pos = n if end < 0 else end
                spaced = True
                continue

            if text.startswith("/*", self.pos):
                self._skip_block_comment()
                spaced = True
                continue

            if (
                ch == self.settings.joint_marker
                and self.pos + 1 < n
                and not text[self.pos + 1].isspace()
                and not text.startswith(("//", "/*"), self.pos + 1)
            ):
                joint = True
                self.pos += 1
                continue

            start = self.pos
            kind, is_string = self._scan()
            self.tokens.append(
                Token(
                    kind=kind,
                    text=text[start : self.pos],
                    span=self._span(start, self.pos),
                    joint=joint,
                    spaced=spaced,
                    is_string=is_string,
                )
            )
            spaced = False
            joint = False

        return self.tokens

    # -- scanners ------------------------------------------------------------

    def _scan(self) -> tuple[TokenKind, bool]:
        """Advance past one token starting at self.pos and classify it."""
        text = self.text
        ch = text[self.pos]

        if ch in _OPEN:
            self.pos += 1
            return TokenKind.OPEN, False
        if ch in _CLOSE:
            self.pos += 1
            return TokenKind.CLOSE, False

        if text.startswith("r#", self.pos) and _is_word_start(text, self.pos + 2):
            # raw identifier: r#type
            self.pos += 2
            self._scan_word()
            return TokenKind.IDENT, False
        if self._at_prefixed_string():
            return TokenKind.LITERAL, True
        if ch == '"':
            self._scan_string(self.pos)
            return TokenKind.LITERAL, True
        if ch == "'":
            if self._scan_char_or_lifetime():
                return TokenKind.LITERAL, True
            return TokenKind.IDENT, False

        if ch.isalpha() or ch == "_":
            self._scan_word()
            return TokenKind.IDENT, False

        if ch.isdigit():
            self._scan_number()
            return TokenKind.LITERAL, False

        if ch == "-" and self._next_is_digit() and not self._after_operand():
            self.pos += 1
            self._scan_number()
            return TokenKind.LITERAL, False

        for op in OPERATORS:
            if text.startswith(op, self.pos):
                self.pos += len(op)
                return TokenKind.PUNCT, False

        self.pos += 1
        return TokenKind.PUNCT, False

    def _scan_word(self) -> None:
        n = len(self.text)
        while self.pos < n and (self.text[self.pos].isalnum() or self.text[self.pos] == "_"):
            self.pos += 1

    def _scan_number(self) -> None:
        text = self.text
        n = len(text)
        if text.startswith(("0x", "0o", "0b"), self.pos):
            self.pos += 2
            self._scan_word()
            return

        self._scan_digits()
        if self.pos + 1 < n and text[self.pos] == "." and text[self.pos + 1].isdigit():
            self.pos += 1
            self._scan_digits()
        if self.pos < n and text[self.pos] in "eE":
            k = self.pos + 1
            if k < n and text[k] in "+-":
                k += 1
            if k < n and text[k].isdigit():
                self.pos = k
                self._scan_digits()
        # type suffix: 1u64, 2.0f32
        self._scan_word()

    def _scan_digits(self) -> None:
        n = len(self.text)
        while self.pos < n and (self.text[self.pos].isdigit() or self.text[self.pos] == "_"):
            self.pos += 1

    def _at_prefixed_string(self) -> bool:
        text = self.text
        for prefix in _STRING_PREFIXES:
            if not text.startswith(prefix, self.pos):
                continue
            k = self.pos + len(prefix)
            if k >= len(text):
                continue
            if "r" in prefix and text[k] in '"#':
                hashes = 0
                while k < len(text) and text[k] == "#":
                    hashes += 1
                    k += 1
                if k < len(text) and text[k] == '"':
                    self._scan_raw_string(self.pos, k, hashes)
                    return True
            elif prefix in ("b", "c") and text[k] == '"':
                self.pos = k
                self._scan_string(k - len(prefix))
                return True
            elif prefix == "b" and text[k] == "'":
                self.pos = k
                if not self._scan_char_or_lifetime():
                    raise syntax_error("unterminated byte literal", self._span(k - 1, k + 1))
                return True
        return False

    def _scan_string(self, start: int) -> None:
        text = self.text
        k = self.pos + 1
        while k < len(text):
            if text[k] == "\\":
                k += 2
                continue
            if text[k] == '"':
                self.pos = k + 1
                return
            k += 1
        raise syntax_error("unterminated string literal", self._span(start, len(text)))

    def _scan_raw_string(self, start: int, quote: int, hashes: int) -> None:
        closing = '"' + "#" * hashes
        end = self.text.find(closing, quote + 1)
        if end < 0:
            raise syntax_error("unterminated raw string literal", self._span(start, len(self.text)))
        self.pos = end + len(closing)

    def _scan_char_or_lifetime(self) -> bool:
        """Scan a char literal ('x', '\\n') or a lifetime ('a). Returns True for char literals."""
        text = self.text
        start = self.pos
        k = start + 1
        if k < len(text) and text[k] == "\\":
            k += 2
            while k < len(text) and text[k] not in "'\n":
                k += 1
            if k < len(text) and text[k] == "'":
                self.pos = k + 1
                return True
            raise syntax_error("unterminated char literal", self._span(start, k))
        if k + 1 < len(text) and text[k + 1] == "'":
            self.pos = k + 2
            return True
        if _is_word_start(text, k):
            self.pos = k
            self._scan_word()
            return False
        raise syntax_error("unterminated char literal", self._span(start, min(k + 1, len(text))))

    def _skip_block_comment(self) -> None:
        text = self.text
        start = self.pos
        depth = 0
        k = self.pos
        while k < len(text):
            if text.startswith("/*", k):
                depth += 1
                k += 2
            elif text.startswith("*/", k):
                depth -= 1
                k += 2
                if depth == 0:
                    self.pos = k
                    return
            else:
                k += 1
        raise syntax_error("unterminated block comment", self._span(start, len(text)))

    # -- helpers -------------------------------------------------------------

    def _next_is_digit(self) -> bool:
        k = self.pos + 1
        return k < len(self.text) and self.text[k].isdigit()

    def _after_operand(self) -> bool:
        if not self.tokens:
            return False
        prev = self.tokens[-1]
        return prev.kind in (TokenKind.IDENT, TokenKind.LITERAL, TokenKind.CLOSE)

    def _span(self, start: int, end: int) -> Span:
        lo = bisect.bisect_right(self._line_starts, start) - 1
        return Span(start=start, end=end, line=lo + 1, column=start - self._line_starts[lo] + 1)
