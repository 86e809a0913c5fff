# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Leaf entities of the module tree: globals/constants/ivars (VertexEntity),
methods (MethodEntity) and type aliases (TypeAliasEntity).

An entity is created on first lookup and never destroyed. Whether it exists
is purely a function of its decl/def bookkeeping; callers ask `exist()`.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

from rbgraph.core.types_core import Type
from rbgraph.core.vertex import Vertex
from rbgraph.env.ref_set import RefSet

if TYPE_CHECKING:
	from rbgraph.env.global_env import GlobalEnv
	from rbgraph.env.nodes import TypeAliasNode


class VertexEntity:
	"""
	Slot for one global, constant or instance variable.

	`vtx` is created once and kept for the entity's lifetime, so the solver
	can attach facts to it while decls/defs come and go.
	"""

	def __init__(self, show_name: str = "gvar") -> None:
		self.decls: RefSet[Any] = RefSet(what="decl")
		self.defs: RefSet[Any] = RefSet(what="def")
		self.vtx = Vertex(show_name, self)

	def add_decl(self, decl: Any) -> None:
		self.decls.add(decl)

	def remove_decl(self, decl: Any) -> None:
		self.decls.remove(decl)

	def add_def(self, def_: Any) -> None:
		self.defs.add(def_)

	def remove_def(self, def_: Any) -> None:
		self.defs.remove(def_)

	def exist(self) -> bool:
		return bool(self.decls) or bool(self.defs)


class MethodEntity:
	def __init__(self) -> None:
		# Set for methods the runtime provides without any decl/def.
		self.builtin: Any = None
		self.decls: RefSet[Any] = RefSet(what="method decl")
		self.defs: RefSet[Any] = RefSet(what="method def")
		# alias node -> original method name
		self.aliases: Dict[Any, str] = {}
		# call sites whose result depends on this method
		self.callsites: RefSet[Any] = RefSet(what="callsite")

	def add_decl(self, decl: Any) -> None:
		self.decls.add(decl)

	def remove_decl(self, decl: Any) -> None:
		self.decls.remove(decl)

	def add_def(self, mdef: Any) -> "MethodEntity":
		self.defs.add(mdef)
		return self

	def remove_def(self, mdef: Any) -> None:
		self.defs.remove(mdef)

	def add_alias(self, node: Any, old_mid: str) -> None:
		self.aliases[node] = old_mid

	def remove_alias(self, node: Any) -> None:
		if node not in self.aliases:
			raise AssertionError(f"alias {node!r} is not registered (caller bug)")
		del self.aliases[node]

	def exist(self) -> bool:
		return bool(self.builtin) or bool(self.decls) or bool(self.defs) or bool(self.aliases)

	def add_run_all_mdefs(self, genv: "GlobalEnv") -> None:
		for mdef in self.defs:
			genv.add_run(mdef)

	def add_run_all_callsites(self, genv: "GlobalEnv") -> None:
		for callsite in self.callsites:
			genv.add_run(callsite)


class TypeAliasEntity:
	"""
	`type name = ...` declarations. The cached type is the first registered
	decl's; conflicting redeclarations are not reconciled.
	"""

	def __init__(self) -> None:
		self.decls: RefSet["TypeAliasNode"] = RefSet(what="type alias decl")
		self.type: Optional[Type] = None

	def exist(self) -> bool:
		return bool(self.decls)

	def add_decl(self, decl: "TypeAliasNode") -> None:
		self.decls.add(decl)
		if self.type is None:
			self.type = decl.type

	def remove_decl(self, decl: "TypeAliasNode") -> None:
		self.decls.remove(decl)
		if self.type == decl.type:
			first = self.decls.first()
			self.type = first.type if first is not None else None


__all__ = ["VertexEntity", "MethodEntity", "TypeAliasEntity"]
