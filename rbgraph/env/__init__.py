"""
rbgraph.env: the long-lived entity graph.

Modules:
  - kinds: Receiver and StaticEvalKind enums
  - nodes: capability protocols for opaque decl/def nodes
  - ref_set: insertion-ordered reference sets
  - entity: vertex/method/type-alias entities
  - module_entity: ModuleEntity and the ModuleTable arena
  - global_env: scheduler-facing GlobalEnv protocol + in-memory env
"""

__all__ = [
    "kinds",
    "nodes",
    "ref_set",
    "entity",
    "module_entity",
    "global_env",
]
