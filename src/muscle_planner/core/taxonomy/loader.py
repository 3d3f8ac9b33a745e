"""
YAML → Taxonomy loader.

Loads muscle groups and subdivisions from the bundled
``src/muscle_planner/muscles.yaml``.

User overrides: place a ``muscles.yaml`` with the same shape in
``~/.muscle-planner/``. Entries are matched by ``id`` and deep-merged over
the bundled definition, so only changed keys need to be listed (e.g. a
coach's own landmarks). Entries whose id is not bundled are appended.

Usage (internal, called by registry.py):
    from .loader import load_taxonomy_from_yaml
    taxonomy = load_taxonomy_from_yaml()   # Taxonomy or None on failure
"""

from __future__ import annotations

import importlib.resources
import warnings
from pathlib import Path
from typing import Any

import yaml

from ..config import get_user_data_dir
from .base import BODY_REGIONS, MuscleGroupDef, MuscleLandmarks, SubdivisionDef, Taxonomy

_REQUIRED_MUSCLE_FIELDS: frozenset[str] = frozenset(
    {"id", "label", "body_region", "color_class", "color_hex", "landmarks"}
)

_REQUIRED_SUBDIVISION_FIELDS: frozenset[str] = frozenset({"id", "label", "parent_id"})

_REQUIRED_LANDMARKS: frozenset[str] = frozenset({"MV", "MEV", "MAV", "MRV"})


def landmarks_from_dict(d: dict) -> MuscleLandmarks:
    """Convert a raw {MV, MEV, MAV, MRV} dict, raising ValueError on bad data."""
    if not isinstance(d, dict):
        raise ValueError(f"landmarks must be a mapping, got {type(d).__name__}")
    missing = _REQUIRED_LANDMARKS - set(d)
    if missing:
        raise ValueError(f"landmarks missing fields: {sorted(missing)}")
    return MuscleLandmarks(
        mv=int(d["MV"]),
        mev=int(d["MEV"]),
        mav=int(d["MAV"]),
        mrv=int(d["MRV"]),
    )


def muscle_group_from_dict(d: dict) -> MuscleGroupDef:
    """Convert a raw dict (from YAML) to a MuscleGroupDef.

    Raises ValueError if any required field is absent or invalid.
    """
    missing = _REQUIRED_MUSCLE_FIELDS - set(d)
    if missing:
        raise ValueError(f"MuscleGroupDef missing fields: {sorted(missing)}")
    region = str(d["body_region"])
    if region not in BODY_REGIONS:
        raise ValueError(f"unknown body_region {region!r}")
    return MuscleGroupDef(
        id=str(d["id"]),
        label=str(d["label"]),
        body_region=region,  # type: ignore[arg-type]
        color_class=str(d["color_class"]),
        color_hex=str(d["color_hex"]),
        landmarks=landmarks_from_dict(d["landmarks"]),
        exercise_filters=tuple(str(x) for x in d.get("exercise_filters") or ()),
    )


def subdivision_from_dict(d: dict) -> SubdivisionDef:
    """Convert a raw dict (from YAML) to a SubdivisionDef."""
    missing = _REQUIRED_SUBDIVISION_FIELDS - set(d)
    if missing:
        raise ValueError(f"SubdivisionDef missing fields: {sorted(missing)}")
    return SubdivisionDef(
        id=str(d["id"]),
        label=str(d["label"]),
        parent_id=str(d["parent_id"]),
        exercise_filters=tuple(str(x) for x in d.get("exercise_filters") or ()),
    )


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML mapping; warn and return {} if the file is unreadable."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        warnings.warn(f"muscle-planner: could not read {path} ({exc})", stacklevel=2)
        return {}
    return data if isinstance(data, dict) else {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _merge_by_id(base: list, override: list) -> list[dict]:
    """Merge two lists of {id: ...} records; matching ids deep-merge, new ids append."""
    merged = [dict(r) for r in base if isinstance(r, dict)]
    index = {r.get("id"): i for i, r in enumerate(merged)}
    for rec in override:
        if not isinstance(rec, dict):
            continue
        i = index.get(rec.get("id"))
        if i is None:
            index[rec.get("id")] = len(merged)
            merged.append(dict(rec))
        else:
            merged[i] = _deep_merge(merged[i], rec)
    return merged


def get_bundled_yaml_path(filename: str = "muscles.yaml") -> Path | None:
    """Return the path to a YAML file bundled with the package, or None."""
    ref = importlib.resources.files("muscle_planner").joinpath(filename)
    with importlib.resources.as_file(ref) as p:
        return p if p.exists() else None


def get_user_yaml_path(filename: str = "muscles.yaml") -> Path | None:
    """Return ~/.muscle-planner/<filename> if it exists, else None."""
    p = get_user_data_dir() / filename
    return p if p.exists() else None


def taxonomy_from_dict(raw: dict) -> Taxonomy:
    """Build a Taxonomy from raw YAML data, skipping invalid entries with a warning."""
    muscles: list[MuscleGroupDef] = []
    for rec in raw.get("muscle_groups") or []:
        if not isinstance(rec, dict):
            warnings.warn(f"muscle-planner: skipping malformed muscle group {rec!r}", stacklevel=2)
            continue
        try:
            muscles.append(muscle_group_from_dict(rec))
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"muscle-planner: skipping muscle group {rec.get('id')!r}: {exc}",
                stacklevel=2,
            )

    known = {m.id for m in muscles}
    subdivisions: list[SubdivisionDef] = []
    for rec in raw.get("subdivisions") or []:
        if not isinstance(rec, dict):
            warnings.warn(f"muscle-planner: skipping malformed subdivision {rec!r}", stacklevel=2)
            continue
        try:
            sub = subdivision_from_dict(rec)
        except (ValueError, TypeError) as exc:
            warnings.warn(
                f"muscle-planner: skipping subdivision {rec.get('id')!r}: {exc}",
                stacklevel=2,
            )
            continue
        if sub.parent_id not in known:
            warnings.warn(
                f"muscle-planner: skipping subdivision {sub.id!r}: "
                f"unknown parent {sub.parent_id!r}",
                stacklevel=2,
            )
            continue
        if sub.id in known or any(s.id == sub.id for s in subdivisions):
            warnings.warn(f"muscle-planner: skipping duplicate id {sub.id!r}", stacklevel=2)
            continue
        subdivisions.append(sub)

    return Taxonomy(muscle_groups=tuple(muscles), subdivisions=tuple(subdivisions))


def load_taxonomy_from_yaml(
    bundled_path: Path | None = None,
    user_path: Path | None = None,
) -> Taxonomy | None:
    """Return the Taxonomy loaded from the bundled YAML plus user overrides.

    Load order (later overrides earlier):
    1. Bundled src/muscle_planner/muscles.yaml
    2. User override at ~/.muscle-planner/muscles.yaml

    Returns None (rather than raising) when no muscle group could be loaded
    so the registry can report a clear startup error.
    """
    if bundled_path is None:
        bundled_path = get_bundled_yaml_path()
    if user_path is None:
        user_path = get_user_yaml_path()

    raw: dict[str, Any] = {}
    if bundled_path is not None:
        raw = _load_yaml_file(bundled_path)

    if user_path is not None:
        user_raw = _load_yaml_file(user_path)
        for key in ("muscle_groups", "subdivisions"):
            if user_raw.get(key):
                raw[key] = _merge_by_id(raw.get(key) or [], user_raw[key])

    if not raw.get("muscle_groups"):
        return None

    taxonomy = taxonomy_from_dict(raw)
    return taxonomy if taxonomy.muscle_groups else None
