"""
Version comparator — orders package versions such as ``1.0-1`` or ``2.0rc1-3``.

A version is a sequence of numeric and word tokens plus an optional
``-<revision>``. Words carry fixed weights so that pre-releases sort
before the release; ``scm`` (1100) and ``cvs`` (1000) outrank any
component below those values, so ``2000`` still beats ``scm``. Missing
tokens count as zero.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import zip_longest

from rocktree.core.errors import ValidationError

_TOKEN_RE = re.compile(r"\d+|[A-Za-z]+")
_REVISION_RE = re.compile(r"^(.*)-(\d+)$")

_WORD_WEIGHTS = {
    "scm": 1100,
    "cvs": 1000,
    "rc": -1000,
    "pre": -10000,
    "beta": -100000,
    "alpha": -1000000,
}


@dataclass(frozen=True)
class Version:
    """A parsed version, comparable with ``<`` and ``==``."""

    text: str
    tokens: tuple[float, ...]
    revision: int = 0

    def _key(self, other: Version) -> tuple[tuple[float, ...], tuple[float, ...]]:
        pairs = list(zip_longest(self.tokens, other.tokens, fillvalue=0))
        mine = tuple(a for a, _ in pairs) + (self.revision,)
        theirs = tuple(b for _, b in pairs) + (other.revision,)
        return mine, theirs

    def __lt__(self, other: Version) -> bool:
        mine, theirs = self._key(other)
        return mine < theirs

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        mine, theirs = self._key(other)
        return mine == theirs

    def __hash__(self) -> int:
        tokens = list(self.tokens)
        while tokens and tokens[-1] == 0:
            tokens.pop()
        return hash((tuple(tokens), self.revision))


def parse_version(text: str) -> Version:
    """Parse a version string.

    The revision is the trailing ``-<digits>``; any earlier dashes are
    separators. Unknown words weigh ``ord(first letter) / 1000``, so
    ``1.0a`` sorts after ``1.0`` and before ``1.1``.

    Raises:
        ValidationError: If the string is empty or has no tokens.
    """
    if not isinstance(text, str) or not text.strip():
        raise ValidationError(f"Invalid version: {text!r}")

    base, rev = text.strip(), 0
    match = _REVISION_RE.match(base)
    if match:
        base, rev = match.group(1), int(match.group(2))

    tokens: list[float] = []
    for token in _TOKEN_RE.findall(base):
        if token.isdigit():
            tokens.append(int(token))
            continue
        word = token.lower()
        tokens.append(_WORD_WEIGHTS.get(word, ord(word[0]) / 1000))

    if not tokens:
        raise ValidationError(f"Invalid version: {text!r}")
    return Version(text=text, tokens=tuple(tokens), revision=rev)


def is_newer(a: str, b: str) -> bool:
    """True iff version ``a`` is strictly newer than ``b``."""
    return parse_version(b) < parse_version(a)
