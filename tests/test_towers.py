import pytest

from hfcalotrigger.towers import (
    HFTower,
    Jet,
    PFCluster,
    TOWERS_IN_ETA,
    TOWERS_PER_LINK,
    ascend_descend,
    best_of_2,
    process_input_link,
)


def _make_link(first, second):
    link = 0
    for eta, word in enumerate(first):
        link |= word << (eta * 10)
    for eta, word in enumerate(second):
        link |= word << (eta * 10 + 110)
    return link


FIRST = [(eta % 4) << 8 | (eta * 7 + 3) for eta in range(11)]
SECOND = [((eta + 1) % 4) << 8 | (eta * 11 + 5) for eta in range(11)]


@pytest.mark.parametrize("word", range(1024))
def test_tower_word_round_trip(word):
    assert HFTower.from_word(word).word() == word


def test_tower_from_word_fields():
    energy, fb = 171, 2
    tower = HFTower.from_word((fb << 8) | energy)
    assert tower.energy == energy
    assert tower.fb == fb
    assert tower.eta == 0
    assert tower.phi == 0


def test_tower_fields_wrap_to_width():
    tower = HFTower()
    tower.energy = 1024
    tower.eta = 32
    assert tower.energy == 0
    assert tower.eta == 0


def test_process_input_link_shape():
    grid = process_input_link(_make_link(FIRST, SECOND))
    assert len(grid) == TOWERS_IN_ETA
    assert all(len(row) == TOWERS_PER_LINK for row in grid)


def test_process_input_link_doubles_and_duplicates():
    grid = process_input_link(_make_link(FIRST, SECOND))
    for eta in range(TOWERS_IN_ETA - 2):
        a = HFTower.from_word(FIRST[eta])
        b = HFTower.from_word(SECOND[eta])
        assert grid[eta][0].energy == 2 * a.energy
        assert grid[eta][1] == grid[eta][0]
        assert grid[eta][2].energy == 2 * b.energy
        assert grid[eta][3] == grid[eta][2]
        assert grid[eta][0].fb == a.fb
        assert grid[eta][2].fb == b.fb


def test_process_input_link_last_rows_shared():
    grid = process_input_link(_make_link(FIRST, SECOND))
    a10 = HFTower.from_word(FIRST[10])
    b10 = HFTower.from_word(SECOND[10])
    assert [t.energy for t in grid[10]] == [a10.energy] * TOWERS_PER_LINK
    assert [t.energy for t in grid[11]] == [b10.energy] * TOWERS_PER_LINK
    assert all(t.fb == a10.fb for t in grid[10])


def test_process_input_link_cells_independent():
    grid = process_input_link(_make_link(FIRST, SECOND))
    before = grid[3][1].energy
    grid[3][0].energy = 0
    assert grid[3][1].energy == before


def test_process_input_link_empty():
    grid = process_input_link(0)
    assert all(t == HFTower() for row in grid for t in row)


def test_jet_data_fields():
    jet = Jet(et=1234, eta=5, phi=100, seed_et=9000)
    word = jet.data()
    assert word & 0xFFF == jet.et
    assert (word >> 12) & 0x7 == jet.eta
    assert (word >> 15) & 0x7F == jet.phi
    assert word >> 27 == jet.seed_et


def test_jet_fields_wrap():
    assert Jet(eta=8).eta == 0
    assert Jet(et=4096).et == 0
    assert Jet().data() == 0


@pytest.mark.parametrize("word", [0, 1, 4095, 123456, (1 << 25) - 1])
def test_pf_cluster_word_round_trip(word):
    assert PFCluster.from_word(word).data() == word


def test_pf_cluster_data_round_trip():
    cluster = PFCluster(et=300, eta=13, phi=71)
    assert PFCluster.from_word(cluster.data()) == cluster


def test_pf_cluster_spare_includes_eg_bit():
    cluster = PFCluster.from_word(1 << 25)
    assert cluster.is_eg == 1
    assert cluster.spare == 1


def test_best_of_2_towers():
    low = HFTower(energy=3)
    high = HFTower(energy=9)
    assert best_of_2(low, high) is high
    assert best_of_2(high, low) is high


def test_best_of_2_tie_prefers_second():
    a = HFTower(energy=4, eta=1)
    b = HFTower(energy=4, eta=2)
    assert best_of_2(a, b) is b


def test_best_of_2_clusters():
    a = PFCluster(et=10)
    b = PFCluster(et=20)
    assert best_of_2(a, b) is b
    assert best_of_2(b, a) is b


def test_ascend_descend_orders():
    small = Jet(et=5)
    big = Jet(et=50)
    assert ascend_descend(small, big) == (big, small)
    assert ascend_descend(big, small) == (big, small)


def test_ascend_descend_tie():
    x = PFCluster(et=7, eta=1)
    y = PFCluster(et=7, eta=2)
    greater, smaller = ascend_descend(x, y)
    assert greater is y
    assert smaller is x