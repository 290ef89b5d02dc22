"""Word segmentation over recognized strings.

Offsets are Python ``str`` indexes, i.e. code points, which is also what the
persisted cache entries store.
"""
from __future__ import annotations

import regex

# Letters and every combining mark (Mn, Mc, Me), so vowel signs and viramas stay
# inside their word.
_WORD_CHAR = r"[\p{L}\p{M}\p{N}\p{Pc}]"

_WORD_RE = regex.compile(
    r"\p{N}+(?:[.,]\p{N}+)+"                         # 1,250.00  3.14
    rf"|{_WORD_CHAR}+(?:['\u2019]{_WORD_CHAR}+)*"    # don't  l'homme
)


def word_ranges(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` code-point ranges of the words in *text*, in order."""
    return [m.span() for m in _WORD_RE.finditer(text)]
