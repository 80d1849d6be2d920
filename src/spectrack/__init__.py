"""
spectrack - keep a hierarchical spec tree in sync with ClickUp

Specs live in Markdown files with a YAML header, organized as
epic/feature/task/subtask/extension directories. spectrack mirrors them as
ClickUp folders, lists, items and subitems.
"""

__version__ = "0.1.0"

from spectrack.core.ids.models import SpecIdParts, SpecLevel
from spectrack.core.specs.models import SpecNode

__all__ = ["SpecIdParts", "SpecLevel", "SpecNode", "__version__"]
