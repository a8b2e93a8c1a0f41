"""
Logic Manifest Diagram Compiler

Turns a business-logic manifest (modules, flows, rules, state machines,
pseudocode, data models) into diagram text.

ARCHITECTURAL GUARANTEE:
------------------------
The model package contains ZERO knowledge of:
    - Mermaid syntax
    - Markmap / Markdown syntax
    - How manifests are fetched or published

This package defines MANIFEST STRUCTURE in `logicmap.model`.

All text generation happens in `logicmap.backends`.
All backends consume the model unchanged.
"""

__version__ = "0.1.0"
