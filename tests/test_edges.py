import pytest

from stagemap.edges import PathCache, derive_all, derive_incremental
from stagemap.model import Stage, StageTelemetry


def make_stages(neighbor_lists, spacing=20.0):
    stages = []
    for index, neighbors in enumerate(neighbor_lists):
        stages.append(Stage(
            id=f"s{index}",
            index=index,
            label=f"S{index}",
            telemetry=StageTelemetry(x=index * spacing, y=10.0, width=5.0, height=5.0),
            neighbors=[str(n) for n in neighbors],
        ))
    return stages


@pytest.fixture
def square():
    # 0-1, 0-2, 1-3, 2-3
    return make_stages([[1, 2], [0, 3], [0, 3], [1, 2]])


class TestDeriveAll:

    def test_one_pair_per_edge(self, square):
        assert derive_all(square) == [(0, 1), (0, 2), (1, 3), (2, 3)]

    def test_scan_order_does_not_create_duplicates(self):
        stages = make_stages([[2], [2], [0, 1]])
        pairs = derive_all(stages)
        assert sorted(pairs) == [(0, 2), (1, 2)]
        assert len(pairs) == 2

    def test_one_sided_reference_still_one_pair(self):
        stages = make_stages([[], [0]])
        assert derive_all(stages) == [(0, 1)]

    def test_deterministic(self, square):
        assert derive_all(square) == derive_all(square)

    def test_empty(self):
        assert derive_all([]) == []


class TestDeriveIncremental:

    def test_only_pairs_touching_index(self, square):
        assert derive_incremental(square, 3) == [(1, 3), (2, 3)]
        assert derive_incremental(square, 0) == [(0, 1), (0, 2)]

    def test_without_index_falls_back_to_all(self, square):
        assert derive_incremental(square) == derive_all(square)
        assert derive_incremental(square, None) == derive_all(square)

    def test_isolated_stage(self):
        stages = make_stages([[1], [0], []])
        assert derive_incremental(stages, 2) == []


class TestPathCache:

    def test_full_update_computes_everything(self, square):
        cache = PathCache()
        paths = cache.update(square)
        assert [p.key for p in paths] == ["0-1", "0-2", "1-3", "2-3"]
        assert all(p.telemetry is not None for p in paths)

    def test_limited_update_keeps_untouched_telemetry(self, square):
        cache = PathCache()
        cache.update(square)
        before = {p.key: p.telemetry for p in cache.paths}

        square[3].telemetry.y = 60.0
        cache.update(square, limit=3)
        after = {p.key: p.telemetry for p in cache.paths}

        assert after["0-1"] is before["0-1"]
        assert after["0-2"] is before["0-2"]
        assert after["1-3"] is not before["1-3"]
        assert after["2-3"] is not before["2-3"]

    def test_update_touching_only_recomputes_degree(self, square):
        cache = PathCache()
        cache.update(square)
        before = {p.key: p.telemetry for p in cache.paths}

        square[0].telemetry.x = 50.0
        touched = cache.update_touching(square, 0)

        assert sorted(p.key for p in touched) == ["0-1", "0-2"]
        after = {p.key: p.telemetry for p in cache.paths}
        assert after["1-3"] is before["1-3"]
        assert after["2-3"] is before["2-3"]
        assert after["0-1"] != before["0-1"]
        assert [p.key for p in cache.paths] == ["0-1", "0-2", "1-3", "2-3"]

    def test_new_path_gets_telemetry_even_when_limited(self, square):
        cache = PathCache()
        cache.update(square)
        square[0].neighbors = ["1", "2", "3"]
        square[3].neighbors = ["0", "1", "2"]
        cache.update(square, limit=1)
        assert cache.get(0, 3).telemetry is not None

    def test_removed_pair_disappears(self, square):
        cache = PathCache()
        cache.update(square)
        square[0].neighbors = ["2"]
        square[1].neighbors = ["3"]
        cache.update(square, limit=0)
        assert cache.get(0, 1) is None
        assert len(cache) == 3
