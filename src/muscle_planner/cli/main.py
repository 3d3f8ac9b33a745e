"""
CLI entry point using Typer.

Provides commands for weekly muscle-plan management:
- new / list / show / rename / clear / duplicate / delete: plan library
- add / remove / set / set-all / reorder / move / paste-day: slot editing
- presets / load-preset / save-preset: templates
- volume / heatmap: derived volume views
- convert: program-template projection
- edit: interactive editor with undo/redo
"""

from .app import app
from .commands import analysis, interactive, plans, slots  # noqa: F401

if __name__ == "__main__":
    app()
