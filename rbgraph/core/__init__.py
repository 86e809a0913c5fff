"""
rbgraph.core: leaf modules shared by the entity layer and its consumers.

Modules:
  - cpath: CPath alias and rendering helpers
  - options: EnvOptions (well-known class paths)
  - types_core: the type-value lattice
  - vertex: inference-graph vertices and signature rendering
  - type_syntax: reader for the canonical type rendering
"""

__all__ = [
    "cpath",
    "options",
    "types_core",
    "vertex",
    "type_syntax",
]
