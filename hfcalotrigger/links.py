"""Output-link packing and input pattern-file reading."""

from __future__ import annotations

import math
from itertools import islice
from os import PathLike
from typing import Iterable, Sequence, Union

from hfcalotrigger.calo import N_JETS
from hfcalotrigger.towers import LINK_WIDTH, N_INPUT_LINKS, Jet

WORD_WIDTH = 64
WORDS_PER_LINK = 8
N_OUTPUT_WORDS = 10

_WORD_MASK = (1 << WORD_WIDTH) - 1
_LINK_MASK = (1 << LINK_WIDTH) - 1
_SUM_WIDTH = 12
_SUM_MASK = (1 << _SUM_WIDTH) - 1


def _place(words: Iterable[int]) -> int:
    link = 0
    for index, word in enumerate(words):
        link |= (int(word) & _WORD_MASK) << (index * WORD_WIDTH)
    return link & _LINK_MASK


def pack_words(words: Sequence[int]) -> int:
    """Pack up to eight 64-bit words into one 576-bit link; the top word stays zero."""
    values = list(words)
    if len(values) > WORDS_PER_LINK:
        raise ValueError(f"at most {WORDS_PER_LINK} words fit on a link, got {len(values)}")
    return _place(values)


def pack_jets(jets: Sequence[Jet]) -> int:
    """Pack the nine jet words into one 576-bit link, the first jet lowest."""
    values = list(jets)
    if len(values) != N_JETS:
        raise ValueError(f"expected {N_JETS} jets, got {len(values)}")
    return _place(jet.data() for jet in values)


def _sum_field(value: Union[float, int]) -> int:
    return math.floor(value) & _SUM_MASK


def pack_sums(
    ex: float, ey: float, ex_pu: float, ey_pu: float, ht: int
) -> int:
    """Pack the energy sums into the low bits of the sums link, 12 bits each.

    Order from bit 0: ex, ey, ex_pu, ey_pu, ht.  Fractions are dropped
    towards minus infinity and each value wraps to 12 bits.
    """
    fields = (ex, ey, ex_pu, ey_pu, ht)
    link = 0
    for index, value in enumerate(fields):
        link |= _sum_field(value) << (index * _SUM_WIDTH)
    return link


def parse_link(text: str) -> int:
    """Parse one link given as a string of binary digits, keeping the low 576 bits."""
    stripped = text.strip()
    if not stripped or any(ch not in "01" for ch in stripped):
        raise ValueError(f"not a binary link word: {text!r}")
    return int(stripped, 2) & _LINK_MASK


def read_pattern_file(path: Union[str, PathLike]) -> list[int]:
    """Read the eighteen input links from the second line of a pattern file."""
    with open(path, encoding="utf-8") as handle:
        lines = list(islice(handle, 2))
    tokens = lines[1].split() if len(lines) > 1 else []
    links = [parse_link(token) for token in tokens[:N_INPUT_LINKS]]
    if len(links) != N_INPUT_LINKS:
        raise ValueError(f"expected {N_INPUT_LINKS} links, got {len(links)}")
    return links