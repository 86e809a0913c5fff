# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Capability protocols for the decl/def nodes the entity layer is fed.

The front-end owns these nodes; entities only store them (by identity/hash)
and read the handful of fields declared here. Signature-level declarations
and code-level definitions satisfy the same protocols, so the entity code
never branches on the concrete node class.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence, Tuple

from rbgraph.core.cpath import CPath
from rbgraph.core.types_core import Type
from rbgraph.core.vertex import Vertex


class StaticRef(Protocol):
	"""Result of a static constant lookup; `cpath` is None when it names no module."""

	cpath: Optional[CPath]


class ModuleNode(Protocol):
	"""A `class ...` / `module ...` declaration or definition."""

	# True for module-like nodes, which never have a superclass.
	is_module: bool
	# Declared type parameters (`class Foo[X, Y]`), None if not declared.
	params: Optional[Tuple[str, ...]]
	# Type arguments given to the superclass (`< Bar[A, B]`), None if absent.
	superclass_args: Optional[Tuple[Any, ...]]
	# Whether the node spells an explicit superclass reference.
	has_superclass: bool
	# Resolved target of that reference; None while the lookup has no result.
	superclass: Optional[StaticRef]


class IncludeNode(Protocol):
	"""An `include M` declaration or definition."""

	target: Optional[StaticRef]


class TypeAliasNode(Protocol):
	type: Type


class MethodDefNode(Protocol):
	"""Only what signature rendering needs from a method definition."""

	params: Sequence[Vertex]
	ret: Vertex


__all__ = ["StaticRef", "ModuleNode", "IncludeNode", "TypeAliasNode", "MethodDefNode"]
