"""muscle-planner: weekly muscle-volume planning board."""

__version__ = "0.1.0"
