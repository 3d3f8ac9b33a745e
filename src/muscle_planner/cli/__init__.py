"""Command-line interface for muscle-planner."""
