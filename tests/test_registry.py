import pytest

from stagemap.errors import InvalidIndex
from stagemap.registry import StageRegistry, shift_references, unnamed_label


def _ids():
    counter = iter(range(1000))
    return lambda: f"stage-{next(counter)}"


@pytest.fixture
def registry():
    return StageRegistry(id_factory=_ids())


@pytest.fixture
def abc(registry):
    """A(nb={1,2}), B(nb={0}), C(nb={0})"""
    registry.add({"label": "A"})
    registry.add({"label": "B", "neighbors": ["0"]})
    registry.add({"label": "C", "neighbors": ["0"]})
    registry.get(0).neighbors = ["1", "2"]
    return registry


class TestUnnamedLabel:

    def test_counts_matching_prefix(self):
        labels = ["Unnamed stage 1", "Castle", "Unnamed stage 7"]
        assert unnamed_label(labels) == "Unnamed stage 3"

    def test_prefix_must_be_followed_by_space(self):
        labels = ["Unnamed stages", "Unnamed stage", "Unnamed stage 1"]
        assert unnamed_label(labels) == "Unnamed stage 2"

    def test_custom_prefix(self):
        assert unnamed_label(["Station 1"], "Station") == "Station 2"

    def test_empty(self):
        assert unnamed_label([]) == "Unnamed stage 1"


class TestShiftReferences:

    def test_drops_removed_and_shifts_higher(self):
        assert shift_references(["0", "2", "3", "5"], 2) == ["0", "2", "4"]

    def test_lower_references_untouched(self):
        assert shift_references(["0", "1"], 4) == ["0", "1"]


class TestAdd:

    def test_assigns_index_and_fresh_id(self, registry):
        first = registry.add()
        second = registry.add()
        assert (first.index, second.index) == (0, 1)
        assert first.id == "stage-0"
        assert second.id == "stage-1"

    def test_default_ids_are_unique_uuids(self):
        registry = StageRegistry()
        ids = {registry.add().id for _ in range(50)}
        assert len(ids) == 50

    def test_default_label(self, registry):
        registry.add()
        registry.add({"label": "Harbour"})
        assert registry.add().label == "Unnamed stage 2"

    def test_keeps_given_id(self, registry):
        assert registry.add({"id": "fixed"}).id == "fixed"

    def test_duplicate_id_rejected(self, registry):
        registry.add({"id": "fixed"})
        with pytest.raises(ValueError):
            registry.add({"id": "fixed"})

    def test_drops_self_and_forward_references(self, registry):
        registry.add()
        stage = registry.add({"neighbors": ["0", "1", "5"]})
        assert stage.neighbors == ["0"]

    def test_telemetry_strings_parsed(self, registry):
        stage = registry.add({"telemetry": {"x": "12.5", "y": "40", "width": "5", "height": "8"}})
        assert stage.telemetry.x == 12.5
        assert stage.telemetry.y == 40.0


class TestLabelChurn:

    def test_label_counts_current_stages_after_removal(self, registry):
        for _ in range(3):
            registry.add()
        registry.remove(1)
        assert registry.add().label == "Unnamed stage 3"


class TestGet:

    @pytest.mark.parametrize("index", [-1, 3, 100, "0", None, True, 1.0])
    def test_invalid_index(self, abc, index):
        with pytest.raises(InvalidIndex):
            abc.get(index)

    def test_invalid_index_is_index_error(self, registry):
        with pytest.raises(IndexError):
            registry.get(0)

    def test_find_by_id(self, abc):
        assert abc.find("stage-1").label == "B"
        assert abc.find("missing") is None


class TestAttributes:

    def test_setters_do_not_touch_structure(self, abc):
        abc.set_label(1, "Bridge")
        abc.set_position(1, 10, 20)
        abc.set_size(1, 4, 6)
        stage = abc.get(1)
        assert stage.label == "Bridge"
        assert (stage.telemetry.x, stage.telemetry.y) == (10.0, 20.0)
        assert (stage.telemetry.width, stage.telemetry.height) == (4.0, 6.0)
        assert stage.neighbors == ["0"]
        assert abc.count() == 3


class TestSetNeighbors:

    def test_symmetric(self, abc):
        abc.set_neighbors(1, ["2"])
        assert abc.get(1).neighbors == ["2"]
        assert abc.get(2).neighbors == ["0", "1"]
        # B no longer lists A, so A must drop B
        assert abc.get(0).neighbors == ["2"]

    def test_self_reference_ignored(self, abc):
        abc.set_neighbors(2, ["2", "1"])
        assert abc.get(2).neighbors == ["1"]
        assert "2" in abc.get(1).neighbors

    def test_out_of_range_ignored(self, abc):
        abc.set_neighbors(1, ["0", "9"])
        assert abc.get(1).neighbors == ["0"]

    def test_accepts_ints(self, abc):
        abc.set_neighbors(1, {0, 2})
        assert abc.get(1).neighbors == ["0", "2"]
        assert abc.get(2).neighbors == ["0", "1"]

    def test_noop_on_single_stage(self, registry):
        registry.add()
        assert registry.set_neighbors(0, ["0"]) is False
        assert registry.get(0).neighbors == []

    def test_invalid_index(self, abc):
        with pytest.raises(InvalidIndex):
            abc.set_neighbors(5, [])


class TestRemove:

    def test_removal_reindexes(self, abc):
        removed = abc.remove(1)
        assert removed.label == "B"
        assert [s.label for s in abc] == ["A", "C"]
        assert [s.index for s in abc] == [0, 1]
        assert abc.get(0).neighbors == ["1"]
        assert abc.get(1).neighbors == ["0"]

    def test_ids_are_stable(self, abc):
        c_id = abc.get(2).id
        abc.remove(0)
        assert abc.get(1).id == c_id
        assert abc.get(1).neighbors == []

    def test_remove_last(self, abc):
        abc.remove(2)
        assert abc.get(0).neighbors == ["1"]
        assert abc.count() == 2

    def test_invalid_index(self, abc):
        with pytest.raises(InvalidIndex):
            abc.remove(3)
        assert abc.count() == 3


class TestLoad:

    def test_load_restores_symmetry_and_drops_bad_refs(self, registry):
        stages = registry.load([
            {"id": "a", "label": "A", "neighbors": ["1", "0", "7"]},
            {"id": "b", "label": "B", "neighbors": []},
            {"id": "a", "label": "", "neighbors": ["1"]},
        ])
        assert [s.index for s in stages] == [0, 1, 2]
        assert stages[0].neighbors == ["1"]
        assert stages[1].neighbors == ["0", "2"]
        assert stages[2].id != "a"
        assert stages[2].label == "Unnamed stage 1"

    def test_load_replaces_previous(self, abc):
        abc.load([{"label": "Only"}])
        assert abc.labels() == ["Only"]
