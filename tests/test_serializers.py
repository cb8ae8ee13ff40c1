"""Tests for galaxy_editor.core.serializers — snapshot copy/restore.

Covers:
  - StarSystem round-trip (nested planets, resources, starbase)
  - Legacy camelCase map entries
  - NumPy scalar coercion
  - Capture and corrupt-snapshot failures
  - Lookup index rebuild
"""

import numpy as np
import pytest

from galaxy_editor.core.serializers import (
    CaptureError,
    CorruptSnapshotError,
    SnapshotError,
    build_lookup,
    copy_document,
    copy_regions,
    dict_to_region,
    dict_to_system,
    restore_document,
    restore_regions,
    system_to_dict,
)
from galaxy_editor.models.system import (
    Planet,
    Point2D,
    RegionDefinition,
    Resource,
    Star,
    Starbase,
    StarSystem,
)


def _make_system(**kwargs) -> StarSystem:
    defaults = dict(
        key="sys-a",
        name="Alpha",
        coordinates=Point2D(10.0, -5.0),
        faction="MUD",
        controlling_faction="ONI",
        stars=[Star(name="Solar", type=2, scale=1.5)],
        planets=[Planet(name="Terra", type=3, orbit=2, angle=45.0,
                        resources=[Resource(name="Iron", type=1, richness=3)])],
        links=["sys-b"],
        is_locked=True,
        is_core=True,
        region_id="region-1",
        starbase=Starbase(tier=2),
    )
    defaults.update(kwargs)
    return StarSystem(**defaults)


class TestSystemRoundTrip:
    def test_full_system(self):
        original = _make_system()
        restored = dict_to_system(system_to_dict(original))
        assert restored == original
        assert restored is not original
        assert restored.planets[0].resources[0] is not original.planets[0].resources[0]

    def test_dict_is_json_safe(self):
        d = system_to_dict(_make_system())
        assert d["coordinates"] == {"x": 10.0, "y": -5.0}
        assert d["starbase"] == {"tier": 2}
        assert d["planets"][0]["resources"][0]["name"] == "Iron"

    def test_numpy_scalars_become_python(self):
        system = _make_system(coordinates=Point2D(np.float64(1.5), np.float64(2.5)))
        d = system_to_dict(system)
        assert type(d["coordinates"]["x"]) is float
        assert d["coordinates"] == {"x": 1.5, "y": 2.5}

    def test_defaults_for_missing_fields(self):
        system = dict_to_system({"key": "k"})
        assert system.name == ""
        assert system.controlling_faction == "Neutral"
        assert system.links == []
        assert system.starbase.tier == 0


class TestLegacyEntries:
    def test_camel_case_and_coordinate_list(self):
        system = dict_to_system({
            "key": "k1",
            "name": "Legacy",
            "coordinates": [3, 4],
            "controllingFaction": "UST",
            "isLocked": True,
            "regionId": "r1",
        })
        assert system.coordinates == Point2D(3.0, 4.0)
        assert system.controlling_faction == "UST"
        assert system.is_locked
        assert system.region_id == "r1"


class TestFailures:
    def test_error_hierarchy(self):
        assert issubclass(CaptureError, SnapshotError)
        assert issubclass(CorruptSnapshotError, SnapshotError)
        assert issubclass(SnapshotError, ValueError)

    def test_uncopyable_value_raises_capture_error(self):
        system = _make_system(name=object())
        with pytest.raises(CaptureError):
            copy_document([system])

    def test_system_must_be_mapping(self):
        with pytest.raises(CorruptSnapshotError):
            dict_to_system(["not", "a", "dict"])

    @pytest.mark.parametrize("key", [None, "", 42])
    def test_system_needs_key(self, key):
        with pytest.raises(CorruptSnapshotError):
            dict_to_system({"key": key, "name": "x"})

    def test_malformed_nested_value(self):
        with pytest.raises(CorruptSnapshotError):
            dict_to_system({"key": "k", "starbase": {"tier": "high"}})

    @pytest.mark.parametrize("state", ["bad", b"bad", {"key": "k"}, None, 3])
    def test_restore_rejects_non_sequence(self, state):
        with pytest.raises(CorruptSnapshotError):
            restore_document(state)

    def test_restore_rejects_bad_item(self):
        with pytest.raises(CorruptSnapshotError):
            restore_document([{"key": "ok"}, "junk"])

    def test_region_needs_id(self):
        with pytest.raises(CorruptSnapshotError):
            dict_to_region({"name": "Core"})
        with pytest.raises(CorruptSnapshotError):
            restore_regions("regions")


class TestSnapshots:
    def test_copy_is_detached(self):
        system = _make_system()
        snapshot = copy_document([system])
        system.name = "Changed"
        system.links.append("sys-c")
        assert snapshot[0]["name"] == "Alpha"
        assert snapshot[0]["links"] == ("sys-b",)

    def test_snapshot_is_read_only(self):
        snapshot = copy_document([_make_system()])
        with pytest.raises(TypeError):
            snapshot[0]["name"] = "Changed"
        with pytest.raises(TypeError):
            snapshot[0]["planets"][0]["resources"][0]["richness"] = 9
        with pytest.raises(AttributeError):
            snapshot[0]["links"].append("sys-c")

    def test_read_only_snapshot_restores(self):
        original = _make_system()
        assert restore_document(copy_document([original])) == [original]

    def test_regions_are_read_only(self):
        snapshot = copy_regions([RegionDefinition(id="r1", name="Core")])
        with pytest.raises(TypeError):
            snapshot[0]["name"] = "Rim"

    def test_restore_preserves_order(self):
        systems = [_make_system(key=k, name=k) for k in ("c", "a", "b")]
        restored = restore_document(copy_document(systems))
        assert [s.key for s in restored] == ["c", "a", "b"]

    def test_regions_round_trip(self):
        regions = [RegionDefinition(id="r1", name="Core", color="#FF0000")]
        assert restore_regions(copy_regions(regions)) == regions


class TestBuildLookup:
    def test_maps_keys_to_objects(self):
        systems = [_make_system(key="a"), _make_system(key="b")]
        lookup = build_lookup(systems)
        assert set(lookup) == {"a", "b"}
        assert lookup["a"] is systems[0]

    def test_skips_empty_key(self):
        assert build_lookup([_make_system(key="")]) == {}

    def test_duplicate_keeps_last(self):
        first, second = _make_system(key="a"), _make_system(key="a", name="Second")
        assert build_lookup([first, second])["a"] is second
