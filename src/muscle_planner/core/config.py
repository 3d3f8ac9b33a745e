"""
Configuration constants for the muscle planning board.

All adjustable parameters are centralized here. Reference data (muscle
groups, landmarks, presets) lives in the bundled YAML files instead; see
core/taxonomy/loader.py and core/presets.py.
"""

import os
from pathlib import Path
from typing import Final

# =============================================================================
# USER DATA
# =============================================================================

USER_DIR_NAME: Final[str] = ".muscle-planner"


def get_user_data_dir() -> Path:
    """Return ~/.muscle-planner (not created here)."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    return home / USER_DIR_NAME


# =============================================================================
# WEEK GRID
# =============================================================================

DAYS_PER_WEEK: Final[int] = 7
DAY_LABELS: Final[tuple[str, ...]] = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")

# =============================================================================
# SLOT BOUNDS AND DEFAULTS
# =============================================================================

SETS_MIN: Final[int] = 1
SETS_MAX: Final[int] = 20
DEFAULT_SETS: Final[int] = 3  # Sets given to a freshly added slot

DEFAULT_REP_MIN: Final[int] = 8  # Used when a slot has no rep range
DEFAULT_REP_MAX: Final[int] = 12
REPS_MIN: Final[int] = 1
REPS_MAX: Final[int] = 100

RIR_MIN: Final[int] = 0
RIR_MAX: Final[int] = 10
RPE_MIN: Final[float] = 1.0
RPE_MAX: Final[float] = 10.0
RPE_STEP: Final[float] = 0.5  # RPE is recorded in half steps

# Tempo: eccentric, bottom pause, concentric, top pause (whole seconds)
TEMPO_LENGTH: Final[int] = 4

# =============================================================================
# WORKING-SET QUALIFICATION (domain rule, intentionally not configurable)
# =============================================================================

WORKING_SET_RIR_MAX: Final[int] = 5  # rir <= 5 counts as a working set
WORKING_SET_RPE_MIN: Final[float] = 5.0  # rpe >= 5 counts as a working set

# =============================================================================
# PLAN METADATA
# =============================================================================

DEFAULT_PLAN_NAME: Final[str] = "Untitled Muscle Plan"
DEFAULT_SELECTED_DAY: Final[int] = 1

# =============================================================================
# BOUNDARY CALLS (persistence / conversion)
# =============================================================================

BOUNDARY_TIMEOUT_SECONDS: Final[float] = 15.0

# =============================================================================
# PROGRAM CONVERSION
# =============================================================================

DEFAULT_MODULE_STATUS: Final[str] = "draft"
MODULE_TYPE: Final[str] = "strength"
MODULE_SESSION_TYPE: Final[str] = "strength"
MODULE_SESSION_TIMING: Final[str] = "anytime"
PROGRAM_VISIBILITY: Final[str] = "private"

INTENSITY_ADVISORY: Final[str] = "Add RIR or RPE for TUST tracking"


def clamp_sets(sets: int) -> int:
    """Clamp a set count to [SETS_MIN, SETS_MAX]."""
    return max(SETS_MIN, min(SETS_MAX, int(sets)))


def clamp_reps(reps: int) -> int:
    """Clamp a rep bound to [REPS_MIN, REPS_MAX]."""
    return max(REPS_MIN, min(REPS_MAX, int(reps)))


def clamp_rir(rir: int) -> int:
    """Clamp reps-in-reserve to [RIR_MIN, RIR_MAX]."""
    return max(RIR_MIN, min(RIR_MAX, int(rir)))


def clamp_rpe(rpe: float) -> float:
    """Clamp RPE to [RPE_MIN, RPE_MAX] and snap it to the nearest half step."""
    snapped = round(float(rpe) / RPE_STEP) * RPE_STEP
    return max(RPE_MIN, min(RPE_MAX, snapped))


def day_label(day_index: int) -> str:
    """Short weekday label for a 1-based day index ("Mon" for 1)."""
    if 1 <= day_index <= DAYS_PER_WEEK:
        return DAY_LABELS[day_index - 1]
    return f"Day {day_index}"
