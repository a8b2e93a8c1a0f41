"""Backends for manifest output generation (Mermaid, Markmap outline)."""

from .mermaid_generator import (
    generate_dependency_graph,
    generate_flowchart,
    generate_project_mindmap,
    generate_state_diagram,
)
from .outline_generator import generate_outline

__all__ = [
    "generate_dependency_graph",
    "generate_flowchart",
    "generate_project_mindmap",
    "generate_state_diagram",
    "generate_outline",
]
