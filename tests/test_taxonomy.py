"""
Tests for the muscle taxonomy: bundled YAML, resolution and user overrides.
"""

import pytest

from muscle_planner.core.taxonomy import (
    MUSCLE_GROUPS,
    SUBDIVISIONS_BY_PARENT,
    MuscleGroupDef,
    MuscleLandmarks,
    SubdivisionDef,
    Taxonomy,
    exercise_filters_for,
    get_default_taxonomy,
    get_muscle,
    get_muscle_display,
    resolve_parent_muscle_id,
)
from muscle_planner.core.taxonomy.loader import load_taxonomy_from_yaml, taxonomy_from_dict


def _muscle(mid: str, region: str = "push") -> MuscleGroupDef:
    return MuscleGroupDef(
        id=mid,
        label=mid.title(),
        body_region=region,
        color_class="bg-test",
        color_hex="#123456",
        landmarks=MuscleLandmarks(4, 8, 16, 20),
    )


# =============================================================================
# Bundled data
# =============================================================================


class TestBundledTaxonomy:
    def test_seventeen_muscle_groups(self):
        assert len(MUSCLE_GROUPS) == 17
        assert MUSCLE_GROUPS[0].id == "pecs"

    def test_every_subdivision_parent_resolves(self):
        tax = get_default_taxonomy()
        for sub in tax.subdivisions:
            assert tax.get_muscle(sub.parent_id) is not None

    def test_landmarks_ascending(self):
        for m in MUSCLE_GROUPS:
            lm = m.landmarks
            assert 0 < lm.mv < lm.mev < lm.mav < lm.mrv

    def test_pecs_landmarks(self):
        lm = get_muscle("pecs").landmarks
        assert (lm.mv, lm.mev, lm.mav, lm.mrv) == (6, 10, 20, 24)

    def test_subdivisions_by_parent(self):
        ids = [s.id for s in SUBDIVISIONS_BY_PARENT["pecs"]]
        assert ids == ["pecs_clavicular", "pecs_sternal", "pecs_costal"]

    def test_get_muscle_unknown_raises(self):
        with pytest.raises(ValueError, match="Unknown muscle"):
            get_muscle("wings")

    def test_exercise_filters(self):
        assert "Upper Chest" in exercise_filters_for("pecs_clavicular")
        assert exercise_filters_for("wings") == ()


# =============================================================================
# Resolution
# =============================================================================


class TestResolveParentMuscleId:
    def test_parent_resolves_to_itself(self):
        assert resolve_parent_muscle_id("lats") == "lats"

    def test_subdivision_resolves_to_parent(self):
        assert resolve_parent_muscle_id("pecs_clavicular") == "pecs"

    def test_unknown_resolves_to_none(self):
        assert resolve_parent_muscle_id("removed_muscle") is None


class TestMuscleDisplay:
    def test_subdivision_inherits_parent_colours(self):
        parent = get_muscle_display("pecs")
        sub = get_muscle_display("pecs_clavicular")
        assert sub.label == "Clavicular (Upper)"
        assert (sub.color_class, sub.color_hex) == (parent.color_class, parent.color_hex)

    def test_unknown_is_none(self):
        assert get_muscle_display("removed_muscle") is None

    def test_label_falls_back_to_id(self):
        assert get_default_taxonomy().label_for("removed_muscle") == "removed_muscle"


# =============================================================================
# Validation
# =============================================================================


class TestTaxonomyValidation:
    def test_landmarks_must_ascend(self):
        with pytest.raises(ValueError):
            MuscleLandmarks(8, 4, 16, 20)

    def test_subdivision_with_unknown_parent_rejected(self):
        with pytest.raises(ValueError, match="unknown parent"):
            Taxonomy((_muscle("chest"),), (SubdivisionDef("upper", "Upper", "back"),))

    def test_duplicate_muscle_id_rejected(self):
        with pytest.raises(ValueError, match="duplicate"):
            Taxonomy((_muscle("chest"), _muscle("chest")))

    def test_order_of_unknown_sorts_last(self):
        tax = Taxonomy((_muscle("a"), _muscle("b")))
        assert tax.order_of("b") == 1
        assert tax.order_of("zzz") == 2


# =============================================================================
# Loader
# =============================================================================


class TestLoader:
    def test_invalid_entries_skipped_with_warning(self):
        raw = {
            "muscle_groups": [
                {
                    "id": "chest",
                    "label": "Chest",
                    "body_region": "push",
                    "color_class": "bg-x",
                    "color_hex": "#000000",
                    "landmarks": {"MV": 4, "MEV": 8, "MAV": 16, "MRV": 20},
                },
                {"id": "broken", "label": "Broken"},
            ],
            "subdivisions": [
                {"id": "upper_chest", "label": "Upper", "parent_id": "chest"},
                {"id": "orphan", "label": "Orphan", "parent_id": "nowhere"},
            ],
        }
        with pytest.warns(UserWarning):
            tax = taxonomy_from_dict(raw)
        assert [m.id for m in tax.muscle_groups] == ["chest"]
        assert [s.id for s in tax.subdivisions] == ["upper_chest"]

    def test_user_override_merges_by_id(self, tmp_path):
        bundled = tmp_path / "muscles.yaml"
        bundled.write_text(
            "muscle_groups:\n"
            "  - id: chest\n"
            "    label: Chest\n"
            "    body_region: push\n"
            "    color_class: bg-x\n"
            "    color_hex: '#000000'\n"
            "    landmarks: {MV: 4, MEV: 8, MAV: 16, MRV: 20}\n"
        )
        user = tmp_path / "user.yaml"
        user.write_text(
            "muscle_groups:\n"
            "  - id: chest\n"
            "    landmarks: {MRV: 22}\n"
            "subdivisions:\n"
            "  - {id: upper_chest, label: Upper, parent_id: chest}\n"
        )

        tax = load_taxonomy_from_yaml(bundled, user)

        chest = tax.get_muscle("chest")
        assert chest.label == "Chest"
        assert chest.landmarks.mrv == 22
        assert chest.landmarks.mv == 4  # untouched keys survive the merge
        assert tax.resolve_parent_muscle_id("upper_chest") == "chest"

    def test_no_muscles_returns_none(self, tmp_path):
        empty = tmp_path / "muscles.yaml"
        empty.write_text("muscle_groups: []\n")
        no_overrides = tmp_path / "user.yaml"
        no_overrides.write_text("{}\n")
        assert load_taxonomy_from_yaml(empty, no_overrides) is None
