"""Jet, tau and energy-sum reconstruction from forward-calorimeter links."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Sequence

from hfcalotrigger.towers import (
    LINK_WIDTH,
    N_INPUT_LINKS,
    TOWERS_IN_ETA,
    TOWERS_IN_PHI,
    HFTower,
    Jet,
    ascend_descend,
    best_of_2,
    process_input_link,
)

N_SECTORS_ST = 2
LINKS_PER_JET_SECTOR = N_INPUT_LINKS // N_SECTORS_ST + 2
SUPER_TOWERS_IN_ETA = TOWERS_IN_ETA // 3 + 2
SUPER_TOWERS_IN_PHI = (TOWERS_IN_PHI // 3) // N_SECTORS_ST + 2
JETS_PER_SECTOR = 5
N_JETS = 9

_LINK_MASK = (1 << LINK_WIDTH) - 1
_ET_SUM_MASK = (1 << 18) - 1
_HT_MASK = (1 << 12) - 1
_FIXED_FRACTION_BITS = 16
_FIXED_SCALE = 1 << _FIXED_FRACTION_BITS

# Sine of the phi-slice centres, quantised (towards minus infinity) to 16 fractional bits.
_SIN_LUT = tuple(
    math.floor(value * _FIXED_SCALE)
    for value in (
        0.0872, 0.2588, 0.4226, 0.5736, 0.7071, 0.8192, 0.9063, 0.9659, 0.9962,
        0.9962, 0.9659, 0.9063, 0.8192, 0.7071, 0.5736, 0.4226, 0.2588, 0.0872,
        -0.0872, -0.2588, -0.4226, -0.5736, -0.7071, -0.8192, -0.9063, -0.9659,
        -0.9962, -0.9962, -0.9659, -0.9063, -0.8192, -0.7071, -0.5736, -0.4226,
        -0.2588, -0.0872,
    )
)


@dataclass(frozen=True)
class CaloObjects:
    """Sorted jets, tau candidates and the calorimeter energy sums of one event."""

    jets: tuple[Jet, ...]
    taus: tuple[Jet, ...]
    ex: float
    ey: float
    ht: int


def _field(value: int, low: int, width: int) -> int:
    return (value >> low) & ((1 << width) - 1)


def _wrap32(raw: int) -> int:
    """Wrap a raw fixed-point value into a signed 32-bit register."""
    return ((raw + (1 << 31)) % (1 << 32)) - (1 << 31)


def _checked_links(links: Iterable[int], count: int) -> list[int]:
    values = [int(link) & _LINK_MASK for link in links]
    if len(values) != count:
        raise ValueError(f"expected {count} links, got {len(values)}")
    return values


def _tournament(towers: Iterable[HFTower]) -> HFTower:
    """Pairwise maximum tree; an odd element out is carried to the next level."""
    level = list(towers)
    while len(level) > 1:
        winners = [best_of_2(a, b) for a, b in zip(level[0::2], level[1::2])]
        if len(level) % 2:
            winners.append(level[-1])
        level = winners
    return level[0]


def unpack_to_super_towers(links: Sequence[int]) -> list[list[HFTower]]:
    """Merge eleven links into a grid of 3x3 super towers indexed ``[eta][phi]``.

    The grid has one empty guard row above and below the four filled eta rows.
    """
    values = _checked_links(links, LINKS_PER_JET_SECTOR)
    towers: list[list[HFTower]] = [[] for _ in range(TOWERS_IN_ETA)]
    for link in values:
        for row, cells in zip(towers, process_input_link(link)):
            row.extend(cells)

    grid = [[HFTower() for _ in range(SUPER_TOWERS_IN_PHI)] for _ in range(SUPER_TOWERS_IN_ETA)]
    for eta in range(SUPER_TOWERS_IN_ETA - 2):
        for phi in range(SUPER_TOWERS_IN_PHI):
            tower = grid[eta + 1][phi]
            tower.energy = sum(
                towers[eta * 3 + m][phi * 3 + n + 1].energy
                for m in range(3)
                for n in range(3)
            )
            tower.eta = eta
            tower.phi = phi
    return grid


def find_max_energy_super_tower(super_towers: Sequence[Sequence[HFTower]]) -> tuple[int, int, int]:
    """Return ``(eta_c, phi_c, seed_et)`` of the most energetic super tower."""
    columns = [
        _tournament(row[phi] for row in super_towers[1:SUPER_TOWERS_IN_ETA - 1])
        for phi in range(SUPER_TOWERS_IN_PHI)
    ]
    best = _tournament(columns)
    return (best.eta + 1) & 0x1F, best.phi, best.energy


def form_jets_and_zero_out(super_towers: Sequence[Sequence[HFTower]], eta_c: int, phi_c: int) -> int:
    """Sum the 3x3 super towers around the centre, zero them in place, return the sum."""
    et_sum = 0
    for i, row in enumerate(super_towers):
        if not (i + 1 >= eta_c and i <= eta_c + 1):
            continue
        for j, tower in enumerate(row):
            if j + 1 >= phi_c and j <= phi_c + 1:
                et_sum += tower.energy
                tower.energy = 0
    return et_sum & _ET_SUM_MASK


def make_jets(links: Sequence[int], sector: int) -> list[Jet]:
    """Build the five jet candidates of one half of the detector."""
    if sector not in range(N_SECTORS_ST):
        raise ValueError(f"sector must be in 0..{N_SECTORS_ST - 1}, got {sector}")
    grid = unpack_to_super_towers(links)
    jets = []
    for _ in range(JETS_PER_SECTOR):
        eta_c, phi_c, seed_et = find_max_energy_super_tower(grid)
        jet = Jet(seed_et=seed_et)
        if 0 <= eta_c <= SUPER_TOWERS_IN_ETA - 1 and 0 <= phi_c <= SUPER_TOWERS_IN_PHI - 1:
            et_sum = form_jets_and_zero_out(grid, eta_c, phi_c)
            if 0 < phi_c < SUPER_TOWERS_IN_PHI - 1 and et_sum:
                jet = Jet(
                    et=et_sum,
                    eta=eta_c - 1,
                    phi=phi_c - 1 + 12 * sector,
                    seed_et=seed_et,
                )
        jets.append(jet)
    return jets


def select_taus(jets: Iterable[Jet]) -> list[Jet]:
    """Keep jets whose seed carries at least 70% of their energy; blank the rest."""
    return [jet if jet.seed_et * 10 >= jet.et * 7 else Jet() for jet in jets]


def _exchange(jets: list[Jet], start: int) -> list[Jet]:
    out = list(jets)
    for k in range(start, len(out) - 1, 2):
        out[k], out[k + 1] = ascend_descend(out[k], out[k + 1])
    return out


def sort_jets(sector_jets: Iterable[Iterable[Jet]]) -> list[Jet]:
    """Sort the jets of both halves by energy and keep the leading nine."""
    flat = [jet for jets in sector_jets for jet in jets]
    expected = N_SECTORS_ST * JETS_PER_SECTOR
    if len(flat) != expected:
        raise ValueError(f"expected {expected} jets, got {len(flat)}")
    for _ in range(expected // 2):
        flat = _exchange(flat, 0)
        flat = _exchange(flat, 1)
    return flat[:N_JETS]


def compute_exy(links: Sequence[int]) -> tuple[float, float]:
    """Compute the missing-energy components ``(ex, ey)`` from all input links."""
    values = _checked_links(links, N_INPUT_LINKS)
    n_lut = len(_SIN_LUT)
    ex = ey = 0
    for j, link in zip(range(0, TOWERS_IN_PHI // 2, 2), values):
        sin_a, cos_a = _SIN_LUT[j], _SIN_LUT[(j + 9) % n_lut]
        sin_b, cos_b = _SIN_LUT[j + 1], _SIN_LUT[(j + 10) % n_lut]
        for i in range(TOWERS_IN_ETA - 2):
            a_energy = _field(link, i * 10, 8) << 1
            b_energy = _field(link, i * 10 + 110, 8) << 1
            ey = _wrap32(ey + a_energy * sin_a)
            ex = _wrap32(ex + a_energy * cos_a)
            ey = _wrap32(ey + b_energy * sin_b)
            ex = _wrap32(ex + b_energy * cos_b)

        a10 = _field(link, 100, 8)
        b10 = _field(link, 210, 8)
        ey = _wrap32(ey + a10 * sin_a * 2)
        ex = _wrap32(ex + a10 * cos_a * 2)
        ey = _wrap32(ey + b10 * sin_b * 2)
        # The second forward-ring term is accumulated into ey as well.
        ey = _wrap32(ey + b10 * cos_b * 2)

    return (ex >> 1) / _FIXED_SCALE, (ey >> 1) / _FIXED_SCALE


def _links_for_sector(links: list[int], sector: int) -> list[int]:
    per_sector = N_INPUT_LINKS // N_SECTORS_ST
    first = per_sector * sector
    return [
        links[(first - 1) % N_INPUT_LINKS],
        *links[first:first + per_sector],
        links[(first + per_sector) % N_INPUT_LINKS],
    ]


def make_calo_objects(links: Sequence[int]) -> CaloObjects:
    """Reconstruct jets, taus, missing energy and HT from the eighteen input links."""
    values = _checked_links(links, N_INPUT_LINKS)
    ex, ey = compute_exy(values)
    sector_jets = [
        make_jets(_links_for_sector(values, sector), sector) for sector in range(N_SECTORS_ST)
    ]
    jets = sort_jets(sector_jets)
    taus = select_taus(jets)
    ht = sum(jet.et for jet in jets) & _HT_MASK
    return CaloObjects(jets=tuple(jets), taus=tuple(taus), ex=ex, ey=ey, ht=ht)