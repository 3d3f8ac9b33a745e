"""
Muscle taxonomy for muscle-planner.

Muscle groups carry volume landmarks; subdivisions roll up to one parent
for aggregation and inherit the parent's display colours.
"""

from .base import (
    BODY_REGION_LABELS,
    BODY_REGIONS,
    MuscleDisplay,
    MuscleGroupDef,
    MuscleLandmarks,
    SubdivisionDef,
    Taxonomy,
)
from .registry import (
    MUSCLE_GROUPS,
    SUBDIVISIONS_BY_PARENT,
    TAXONOMY,
    exercise_filters_for,
    get_default_taxonomy,
    get_muscle,
    get_muscle_display,
    resolve_parent_muscle_id,
)

__all__ = [
    "BODY_REGION_LABELS",
    "BODY_REGIONS",
    "MuscleDisplay",
    "MuscleGroupDef",
    "MuscleLandmarks",
    "SubdivisionDef",
    "Taxonomy",
    "MUSCLE_GROUPS",
    "SUBDIVISIONS_BY_PARENT",
    "TAXONOMY",
    "exercise_filters_for",
    "get_default_taxonomy",
    "get_muscle",
    "get_muscle_display",
    "resolve_parent_muscle_id",
]
