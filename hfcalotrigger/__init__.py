"""Bit-accurate model of a forward-calorimeter trigger: towers, jets, taus, sums and link packing."""

__version__ = "0.1.0"