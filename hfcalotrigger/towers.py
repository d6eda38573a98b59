"""Calorimeter tower, jet and cluster primitives shared by the trigger chain."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Union

TOWERS_IN_ETA = 12
TOWERS_IN_PHI = 72
EXTRA_IN_PHI = 4
EXTRA_IN_ETA = 1
MIN_CLUSTER_SEED_ENERGY = 5

LINK_WIDTH = 576

N_INPUT_LINKS = 18
N_OUTPUT_LINKS = 6

N_PF_LINK = 8
N_PUPPI_LINK = 8
N_SECTORS = 18
N_PF = 48
N_SECTORS_PF = 6

N_PF_CLUSTERS = 4
NTOWER_IN_ETA_PER_SECTOR = TOWERS_IN_ETA + EXTRA_IN_ETA * 2
NTOWER_IN_PHI_PER_SECTOR = (TOWERS_IN_PHI // N_SECTORS) + EXTRA_IN_PHI * 2
LINKS_PER_REGION = (N_INPUT_LINKS // N_SECTORS) + 2
N_SORT_ELEMENTS = 16

TOWERS_PER_LINK = TOWERS_IN_PHI // N_INPUT_LINKS

_LINK_MASK = (1 << LINK_WIDTH) - 1
_WORD_MASK = (1 << 64) - 1
_TOWER_BITS = 10
_SECOND_HALF_OFFSET = 110


def _mask(value: int, width: int) -> int:
    return int(value) & ((1 << width) - 1)


def _bits(value: int, low: int, width: int) -> int:
    return (value >> low) & ((1 << width) - 1)


_TOWER_WIDTHS = {"energy": 10, "fb": 2, "phi": 8, "eta": 5}


@dataclass
class HFTower:
    """One forward-calorimeter tower; fields wrap to their hardware widths."""

    energy: int = 0
    fb: int = 0
    phi: int = 0
    eta: int = 0

    def __setattr__(self, name: str, value: int) -> None:
        width = _TOWER_WIDTHS.get(name)
        if width is not None:
            value = _mask(value, width)
        super().__setattr__(name, value)

    @classmethod
    def from_word(cls, word: int) -> "HFTower":
        """Decode a 10-bit tower word: energy in bits 7..0, feature bits in 9..8."""
        return cls(energy=_bits(word, 0, 8), fb=_bits(word, 8, 2))

    def word(self) -> int:
        """Encode the tower back into its 10-bit word."""
        return (self.energy & 0xFF) | ((self.fb << 8) & 0x300)


@dataclass(frozen=True)
class Jet:
    """A jet candidate with its total and seed transverse energy."""

    et: int = 0
    eta: int = 0
    phi: int = 0
    seed_et: int = 0

    def __post_init__(self) -> None:
        for name, width in (("et", 12), ("eta", 3), ("phi", 7), ("seed_et", 14)):
            object.__setattr__(self, name, _mask(getattr(self, name), width))

    def data(self) -> int:
        """Pack the jet into its 64-bit output word."""
        word = self.et | (self.eta << 12) | (self.phi << 15) | (self.seed_et << 27)
        return word & _WORD_MASK


@dataclass(frozen=True)
class PFCluster:
    """A calorimeter cluster as exchanged between clustering stages."""

    et: int = 0
    eta: int = 0
    phi: int = 0
    is_eg: int = 0
    spare: int = 0

    def __post_init__(self) -> None:
        for name, width in (("et", 12), ("eta", 5), ("phi", 8), ("is_eg", 1), ("spare", 38)):
            object.__setattr__(self, name, _mask(getattr(self, name), width))

    @classmethod
    def from_word(cls, word: int) -> "PFCluster":
        """Decode a 64-bit cluster word; the spare field starts at bit 25."""
        word &= _WORD_MASK
        return cls(
            et=_bits(word, 0, 12),
            eta=_bits(word, 12, 5),
            phi=_bits(word, 17, 8),
            is_eg=_bits(word, 25, 1),
            spare=word >> 25,
        )

    def data(self) -> int:
        """Pack the cluster into its 64-bit word."""
        word = (
            self.et
            | (self.eta << 12)
            | (self.phi << 17)
            | (self.is_eg << 25)
            | (self.spare << 26)
        )
        return word & _WORD_MASK


Comparable = Union[HFTower, PFCluster, Jet]


def _strength(obj: Comparable) -> int:
    if isinstance(obj, HFTower):
        return obj.energy
    return obj.et


def _doubled_tower(word: int) -> HFTower:
    tower = HFTower.from_word(word)
    tower.energy <<= 1
    return tower


def process_input_link(link: int) -> list[list[HFTower]]:
    """Unpack one input link into a grid of towers indexed ``[eta][phi]``.

    The grid has TOWERS_IN_ETA rows and TOWERS_PER_LINK columns.  Each encoded
    tower energy covers two phi columns and is doubled; the last two eta rows
    are shared by all four columns and keep their energy undoubled.
    """
    link = int(link) & _LINK_MASK
    grid: list[list[HFTower]] = []
    for eta in range(TOWERS_IN_ETA - 1):
        low = eta * _TOWER_BITS
        first = _doubled_tower(_bits(link, low, _TOWER_BITS))
        second = _doubled_tower(_bits(link, low + _SECOND_HALF_OFFSET, _TOWER_BITS))
        grid.append([replace(first), replace(first), replace(second), replace(second)])

    last = TOWERS_IN_ETA - 2
    a10 = replace(grid[last][0])
    b10 = replace(grid[last][2])
    a10.energy >>= 1
    b10.energy >>= 1
    grid[last] = [replace(a10) for _ in range(TOWERS_PER_LINK)]
    grid.append([replace(b10) for _ in range(TOWERS_PER_LINK)])
    return grid


def best_of_2(a: Comparable, b: Comparable) -> Comparable:
    """Return the stronger of two towers or clusters; ties go to ``b``."""
    return a if _strength(a) > _strength(b) else b


def ascend_descend(x: Comparable, y: Comparable) -> tuple[Comparable, Comparable]:
    """Return ``(greater, smaller)`` by transverse energy; ties keep ``y`` first."""
    if _strength(x) > _strength(y):
        return x, y
    return y, x