"""
Muscle taxonomy registry.

The default Taxonomy is built once at import time from the bundled
``src/muscle_planner/muscles.yaml`` (plus ``~/.muscle-planner/muscles.yaml``
overrides). If no muscle group can be loaded a RuntimeError is raised: the
application cannot start without valid reference data.

The module-level functions below delegate to that default instance; engine
functions also accept an explicit ``taxonomy`` argument for tests and
alternative reference data.
"""

from .base import MuscleDisplay, MuscleGroupDef, SubdivisionDef, Taxonomy


def _build_taxonomy() -> Taxonomy:
    from .loader import load_taxonomy_from_yaml

    loaded = load_taxonomy_from_yaml()
    if loaded is None:
        raise RuntimeError(
            "muscle-planner: no muscle groups could be loaded from YAML. "
            "Check that src/muscle_planner/muscles.yaml is present and valid."
        )
    return loaded


TAXONOMY: Taxonomy = _build_taxonomy()

MUSCLE_GROUPS: tuple[MuscleGroupDef, ...] = TAXONOMY.muscle_groups

SUBDIVISIONS_BY_PARENT: dict[str, tuple[SubdivisionDef, ...]] = {
    m.id: tuple(TAXONOMY.subdivisions_of(m.id)) for m in MUSCLE_GROUPS
}


def get_default_taxonomy() -> Taxonomy:
    """Return the process-wide taxonomy built at import time."""
    return TAXONOMY


def get_muscle(muscle_id: str) -> MuscleGroupDef:
    """
    Return the MuscleGroupDef for a parent muscle id.

    Raises:
        ValueError: If muscle_id is not a muscle group in the registry
    """
    muscle = TAXONOMY.get_muscle(muscle_id)
    if muscle is None:
        valid = ", ".join(m.id for m in MUSCLE_GROUPS)
        raise ValueError(f"Unknown muscle '{muscle_id}'. Valid IDs: {valid}")
    return muscle


def resolve_parent_muscle_id(muscle_id: str) -> str | None:
    """Parent muscle id for a muscle or subdivision id; None if unknown."""
    return TAXONOMY.resolve_parent_muscle_id(muscle_id)


def get_muscle_display(muscle_id: str) -> MuscleDisplay | None:
    """Label and colours for a muscle or subdivision id; None if unknown."""
    return TAXONOMY.get_muscle_display(muscle_id)


def exercise_filters_for(muscle_id: str) -> tuple[str, ...]:
    """Exercise-library filter tags for a muscle or subdivision id (empty if unknown)."""
    return TAXONOMY.exercise_filters_for(muscle_id)
