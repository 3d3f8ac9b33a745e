"""
JSON-file storage for muscle plans.

One plan per file under the store directory (``<plan_id>.json``). Each file
holds the plan record ``{name, description, slots[]}`` plus library
metadata: timestamps, the ``isPreset`` flag for coach-saved presets and the
id of the program it was last converted into.
"""

import json
import os
import tempfile
import uuid
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any

from ..core.config import get_user_data_dir
from .serializers import ValidationError, record_to_plan

PLANS_DIR_NAME = "plans"
PROGRAMS_DIR_NAME = "programs"


@dataclass(frozen=True)
class PlanSummary:
    """One row of the plan library."""

    plan_id: str
    name: str
    description: str
    is_preset: bool
    updated_at: str
    training_days: int
    total_sets: int
    muscle_count: int
    converted_program_id: str | None = None


def plan_stats(record: dict[str, Any]) -> tuple[int, int, int]:
    """
    (training days, total sets, distinct muscle ids) of a stored record.

    Tolerates malformed slot entries, which are simply not counted.
    """
    days: set[int] = set()
    muscles: set[str] = set()
    total = 0
    slots = record.get("slots")
    for s in slots if isinstance(slots, list) else []:
        if not isinstance(s, dict):
            continue
        day = s.get("dayIndex")
        if isinstance(day, int) and not isinstance(day, bool):
            days.add(day)
        if isinstance(s.get("muscleId"), str) and s["muscleId"]:
            muscles.add(s["muscleId"])
        try:
            total += int(s.get("sets") or 0)
        except (TypeError, ValueError, OverflowError):
            continue
    return len(days), total, len(muscles)


def _now() -> str:
    return datetime.now().isoformat(timespec="microseconds")


class PlanStore:
    """
    Manages plans stored as individual JSON files.

    Writes go through a temporary file and ``os.replace`` so a plan file is
    either the old record or the new one, never a partial write.
    """

    def __init__(self, root: str | Path):
        """
        Initialize the store.

        Args:
            root: Directory holding the plan files
        """
        self.root = Path(root)

    def init(self) -> None:
        """Create the store directory if needed."""
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, plan_id: str) -> Path:
        if not plan_id or "/" in plan_id or "\\" in plan_id or plan_id.startswith("."):
            raise ValidationError(f"Invalid plan id: {plan_id!r}")
        return self.root / f"{plan_id}.json"

    def exists(self, plan_id: str) -> bool:
        return self._path(plan_id).exists()

    def _read(self, plan_id: str) -> dict[str, Any]:
        path = self._path(plan_id)
        if not path.exists():
            raise FileNotFoundError(f"Plan not found: {plan_id}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Corrupt plan file {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValidationError(f"Corrupt plan file {path}: not an object")
        return data

    def _write(self, plan_id: str, data: dict[str, Any]) -> None:
        self.init()
        path = self._path(plan_id)
        fd, tmp = tempfile.mkstemp(dir=self.root, prefix=f".{plan_id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    # ------------------------------------------------------------------
    # Plan records
    # ------------------------------------------------------------------

    def load_plan(self, plan_id: str) -> dict[str, Any]:
        """
        Load a plan record.

        Returns:
            Dict with name, description and raw slot records

        Raises:
            FileNotFoundError: If no plan has that id
            ValidationError: If the file is not a valid plan record
        """
        data = self._read(plan_id)
        record_to_plan(data)  # validate before handing out
        return {
            "name": data.get("name"),
            "description": data.get("description") or "",
            "slots": list(data.get("slots") or []),
        }

    def save_plan(self, plan_id: str | None, record: dict[str, Any]) -> str:
        """
        Create (plan_id None) or overwrite a plan.

        The whole record is replaced in one write; library metadata
        (creation time, preset flag, converted program id) is kept.

        Returns:
            The plan id
        """
        record_to_plan(record)
        existing: dict[str, Any] = {}
        if plan_id is None:
            plan_id = str(uuid.uuid4())
        elif self.exists(plan_id):
            existing = self._read(plan_id)

        now = _now()
        data = {
            "id": plan_id,
            "name": record.get("name"),
            "description": record.get("description") or "",
            "slots": list(record.get("slots") or []),
            "isPreset": bool(existing.get("isPreset", record.get("isPreset", False))),
            "convertedProgramId": existing.get("convertedProgramId"),
            "createdAt": existing.get("createdAt", now),
            "updatedAt": now,
        }
        self._write(plan_id, data)
        return plan_id

    def delete_plan(self, plan_id: str) -> None:
        """
        Delete a plan.

        Raises:
            FileNotFoundError: If no plan has that id
        """
        path = self._path(plan_id)
        if not path.exists():
            raise FileNotFoundError(f"Plan not found: {plan_id}")
        path.unlink()

    def duplicate_plan(self, plan_id: str) -> str:
        """Copy a plan as "<name> (Copy)"; returns the new id."""
        source = self._read(plan_id)
        return self.save_plan(
            None,
            {
                "name": f"{source.get('name')} (Copy)",
                "description": source.get("description") or "",
                "slots": list(source.get("slots") or []),
            },
        )

    def save_as_preset(self, record: dict[str, Any]) -> str:
        """Store a copy of a plan record flagged as a coach preset; returns its id."""
        return self.save_plan(None, {**record, "isPreset": True})

    def save_program(self, projection: dict[str, Any]) -> str:
        """
        Record a converted program under ``<root>/programs/``.

        Stands in for the external program system; returns the new program id.
        """
        program_id = str(uuid.uuid4())
        programs = self.root / PROGRAMS_DIR_NAME
        programs.mkdir(parents=True, exist_ok=True)
        with open(programs / f"{program_id}.json", "w", encoding="utf-8") as f:
            json.dump({"id": program_id, "createdAt": _now(), **projection}, f, indent=2, ensure_ascii=False)
        return program_id

    def set_converted_program_id(self, plan_id: str, program_id: str) -> None:
        """Remember which program a plan was converted into."""
        data = self._read(plan_id)
        data["convertedProgramId"] = program_id
        data["updatedAt"] = _now()
        self._write(plan_id, data)

    # ------------------------------------------------------------------
    # Library
    # ------------------------------------------------------------------

    def list_plans(self, search: str | None = None, presets: bool | None = None) -> list[PlanSummary]:
        """
        List stored plans, most recently updated first.

        Args:
            search: Case-insensitive substring matched on name and description
            presets: True for presets only, False for plans only, None for both

        Unreadable files are skipped.
        """
        if not self.root.exists():
            return []

        needle = search.strip().lower() if search else ""
        summaries: list[PlanSummary] = []
        for path in self.root.glob("*.json"):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    data = json.load(f)
            except (OSError, json.JSONDecodeError):
                continue
            if not isinstance(data, dict):
                continue

            is_preset = bool(data.get("isPreset", False))
            if presets is not None and is_preset != presets:
                continue
            name = str(data.get("name") or "")
            description = str(data.get("description") or "")
            if needle and needle not in name.lower() and needle not in description.lower():
                continue

            days, total, muscles = plan_stats(data)
            summaries.append(
                PlanSummary(
                    plan_id=str(data.get("id") or path.stem),
                    name=name,
                    description=description,
                    is_preset=is_preset,
                    updated_at=str(data.get("updatedAt") or ""),
                    training_days=days,
                    total_sets=total,
                    muscle_count=muscles,
                    converted_program_id=data.get("convertedProgramId"),
                )
            )

        summaries.sort(key=lambda p: p.updated_at, reverse=True)
        return summaries


def get_default_store_path() -> Path:
    """Return ~/.muscle-planner/plans."""
    return get_user_data_dir() / PLANS_DIR_NAME
