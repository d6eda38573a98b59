# hfcalotrigger

A pure-Python, bit-accurate model of a forward-calorimeter trigger
algorithm. It takes the eighteen 576-bit input links of one event and
computes:

- the tower grid carried by each link (`process_input_link`),
- jets found on a 3 × 3 super-tower grid in each half of the detector,
  sorted by transverse energy, with tau candidates selected from them,
- the calorimeter energy sums Ex, Ey and HT,
- 576-bit output link words holding these results.

Field widths follow the hardware: values are truncated and wrap around
exactly as the fixed-width registers do.

## Installation

```
pip install .
```

The package has no runtime dependencies. To run its tests:

```
pip install ".[test]"
pytest
```

## Modules

- `hfcalotrigger.towers`: the `HFTower`, `Jet` and `PFCluster` records
  with their word encodings (`from_word`, `word`, `data`), the link
  unpacker `process_input_link`, and the comparators `best_of_2` and
  `ascend_descend`.
- `hfcalotrigger.calo`: `unpack_to_super_towers`,
  `find_max_energy_super_tower`, `form_jets_and_zero_out`, `make_jets`,
  `select_taus`, `sort_jets` and `compute_exy`, brought together by
  `make_calo_objects`, which returns a `CaloObjects` holding `jets`,
  `taus`, `ex`, `ey` and `ht`.
- `hfcalotrigger.links`: `pack_words` (up to eight 64-bit words into a
  link), `pack_jets` (nine jets into a link), `pack_sums` (five 12-bit
  sums into the low bits of a link), `parse_link` (a binary string into
  a link) and `read_pattern_file` (the eighteen links on the second line
  of a pattern file).

## Example

```python
from hfcalotrigger.calo import make_calo_objects
from hfcalotrigger.links import pack_jets, read_pattern_file

links = read_pattern_file("event.links")
objects = make_calo_objects(links)
print(objects.ht, objects.ex, objects.ey)
jet_link = pack_jets(objects.jets)
print(hex(jet_link))
```

## What the package does not do

- There is no command-line program; the package is used as a library.
- Particle-flow clustering per phi sector, selection of electromagnetic
  cluster candidates and the pile-up-corrected sums are not included.
  `pack_sums` takes `ex_pu` and `ey_pu` as plain values supplied by the
  caller.