# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module entities and the arena that owns them.

A ModuleEntity is one class/module of the analyzed program. It owns its
constant/method/ivar/type-alias tables and tracks the decls/defs that brought
it into existence. Inheritance (superclass, included modules) and the inverse
child links are stored as ModuleIds into the owning ModuleTable, so the
module graph can be cyclic without entities referencing each other directly.

Mutation entry points update local bookkeeping, re-derive local facts
(type params, superclass type args) and push events on the scheduler queue.
Ancestor changes cascade eagerly through every descendant; what the
descendants must recompute is only queued.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional, Tuple

from rbgraph.core.cpath import ROOT_CPATH, CPath, cname_of, show_cpath
from rbgraph.core.options import DEFAULT_OPTIONS, EnvOptions
from rbgraph.core.vertex import Vertex
from rbgraph.env.entity import MethodEntity, TypeAliasEntity, VertexEntity
from rbgraph.env.kinds import Receiver, StaticEvalKind
from rbgraph.env.ref_set import RefSet

if TYPE_CHECKING:
	from rbgraph.env.global_env import GlobalEnv
	from rbgraph.env.nodes import IncludeNode, ModuleNode

logger = logging.getLogger(__name__)

ModuleId = int  # opaque handle into a ModuleTable


class ModuleTable:
	"""
	Arena owning every ModuleEntity of one project.

	The root module (cpath `()`, i.e. Object) is created up front. It is its own
	outer module and is reachable from itself under the name `Object`.
	"""

	def __init__(self, options: EnvOptions | None = None) -> None:
		self.options = options or DEFAULT_OPTIONS
		self._mods: Dict[ModuleId, ModuleEntity] = {}
		self._next_id: ModuleId = 0
		self.root_id = self._add(ROOT_CPATH, None)
		self.root.inner_module_ids["Object"] = self.root_id

	def _add(self, cpath: CPath, outer_id: ModuleId | None) -> ModuleId:
		mod_id = self._next_id
		self._next_id += 1
		self._mods[mod_id] = ModuleEntity(self, mod_id, cpath, mod_id if outer_id is None else outer_id)
		return mod_id

	def get(self, mod_id: ModuleId) -> "ModuleEntity":
		return self._mods[mod_id]

	@property
	def root(self) -> "ModuleEntity":
		return self._mods[self.root_id]

	def lookup(self, cpath: CPath) -> Optional["ModuleEntity"]:
		"""Find the entity at `cpath` without creating anything."""
		mod = self.root
		for cname in cpath:
			inner_id = mod.inner_module_ids.get(cname)
			if inner_id is None:
				return None
			mod = self._mods[inner_id]
		return mod

	def ensure(self, cpath: CPath) -> "ModuleEntity":
		"""Find the entity at `cpath`, creating (nonexistent) entities along the way."""
		mod = self.root
		for cname in cpath:
			inner_id = mod.inner_module_ids.get(cname)
			if inner_id is None:
				inner_id = self._add(mod.cpath + (cname,), mod.mod_id)
				mod.inner_module_ids[cname] = inner_id
			mod = self._mods[inner_id]
		return mod

	def __len__(self) -> int:
		return len(self._mods)

	def __iter__(self) -> Iterator["ModuleEntity"]:
		return iter(self._mods.values())


class ModuleEntity:
	def __init__(self, table: ModuleTable, mod_id: ModuleId, cpath: CPath, outer_id: ModuleId) -> None:
		self._table = table
		self.mod_id = mod_id
		self.cpath = cpath

		self.module_decls: RefSet["ModuleNode"] = RefSet(what="module decl")
		self.module_defs: RefSet["ModuleNode"] = RefSet(what="module def")
		self.include_decls: RefSet["IncludeNode"] = RefSet(what="include decl")
		self.include_defs: RefSet["IncludeNode"] = RefSet(what="include def")

		self.inner_module_ids: Dict[str, ModuleId] = {}
		self.outer_id = outer_id

		# parent modules (superclass and all modules that I include)
		self.superclass_id: Optional[ModuleId] = None
		self.included_module_ids: Dict[Any, ModuleId] = {}
		self._basic_object = cpath == table.options.basic_object_cpath

		# child modules (subclasses and all modules that include me);
		# only ever changed by update_parent on the child side
		self.child_module_ids: RefSet[ModuleId] = RefSet(what="child module")

		# class Foo[X, Y, Z] < Bar[A, B, C]
		self.superclass_type_args: Optional[Tuple[Any, ...]] = None  # A, B, C
		self.type_params: Tuple[str, ...] = ()  # X, Y, Z

		self.consts: Dict[str, VertexEntity] = {}
		self.methods: Dict[Receiver, Dict[str, MethodEntity]] = {r: {} for r in Receiver}
		self.ivars: Dict[Receiver, Dict[str, VertexEntity]] = {r: {} for r in Receiver}
		self.type_aliases: Dict[str, TypeAliasEntity] = {}

		self.static_reads: Dict[str, RefSet[Any]] = {}
		self.ivar_reads: RefSet[Any] = RefSet(what="ivar read")

	# -- navigation -------------------------------------------------------

	@property
	def outer_module(self) -> "ModuleEntity":
		return self._table.get(self.outer_id)

	@property
	def inner_modules(self) -> Dict[str, "ModuleEntity"]:
		return {name: self._table.get(mid) for name, mid in self.inner_module_ids.items()}

	@property
	def superclass(self) -> Optional["ModuleEntity"]:
		return None if self.superclass_id is None else self._table.get(self.superclass_id)

	@property
	def included_modules(self) -> Dict[Any, "ModuleEntity"]:
		return {origin: self._table.get(mid) for origin, mid in self.included_module_ids.items()}

	@property
	def child_modules(self) -> List["ModuleEntity"]:
		return [self._table.get(mid) for mid in self.child_module_ids]

	def get_cname(self) -> str:
		return cname_of(self.cpath)

	def show_cpath(self) -> str:
		return show_cpath(self.cpath)

	def exist(self) -> bool:
		return bool(self.module_decls) or bool(self.module_defs)

	# -- existence and nesting --------------------------------------------

	def on_inner_modules_changed(self, genv: "GlobalEnv", changed_cname: str) -> None:
		"""A module named `changed_cname` appeared in/vanished from this namespace."""
		visited = {self.mod_id}
		stack = [self]
		while stack:
			mod = stack.pop()
			for child_id in mod.child_module_ids:
				# Object is its own child until it gets a declared superclass
				if child_id in visited:
					continue
				visited.add(child_id)
				stack.append(self._table.get(child_id))
			for static_read in mod.static_reads.get(changed_cname, ()):
				genv.add_static_eval_queue(StaticEvalKind.STATIC_READ_CHANGED, static_read)

	def on_module_added(self, genv: "GlobalEnv") -> None:
		if not self.cpath:
			return
		if not self.exist():
			genv.add_static_eval_queue(StaticEvalKind.INNER_MODULES_CHANGED, (self.outer_module, self.get_cname()))
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)

	def on_module_removed(self, genv: "GlobalEnv") -> None:
		if not self.cpath:
			return
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)
		if not self.exist():
			genv.add_static_eval_queue(StaticEvalKind.INNER_MODULES_CHANGED, (self.outer_module, self.get_cname()))

	def add_module_decl(self, genv: "GlobalEnv", decl: "ModuleNode") -> VertexEntity:
		self.on_module_added(genv)

		self.module_decls.add(decl)

		if self.type_params != _params_of(decl):
			self.update_type_params()

		if not decl.is_module and self.superclass_type_args is None:
			self.superclass_type_args = decl.superclass_args

		ce = self.outer_module.get_const(self.get_cname())
		ce.add_decl(decl)
		return ce

	def remove_module_decl(self, genv: "GlobalEnv", decl: "ModuleNode") -> None:
		self.outer_module.get_const(self.get_cname()).remove_decl(decl)
		self.module_decls.remove(decl)

		if self.type_params == _params_of(decl):
			self.update_type_params()
		if not decl.is_module and self.superclass_type_args == decl.superclass_args:
			self.superclass_type_args = None
			for other in self.module_decls:
				if not other.is_module and other.superclass_args is not None:
					self.superclass_type_args = other.superclass_args
					break

		self.on_module_removed(genv)

	def update_type_params(self) -> None:
		"""
		Pick the type parameter list among all current decls.

		Reopenings may disagree; the lexicographically greatest list (plain
		tuple ordering) wins and `()` is used when no decl declares any.
		"""
		best: Optional[Tuple[str, ...]] = None
		for decl in self.module_decls:
			params = _params_of(decl)
			if params is None:
				continue
			if best is None or params > best:
				best = params
		# TODO: report conflicting type parameter lists once diagnostics exist here
		self.type_params = best if best is not None else ()

	def add_module_def(self, genv: "GlobalEnv", node: "ModuleNode") -> VertexEntity:
		self.on_module_added(genv)
		self.module_defs.add(node)
		ce = self.outer_module.get_const(self.get_cname())
		ce.add_def(node)
		return ce

	def remove_module_def(self, genv: "GlobalEnv", node: "ModuleNode") -> None:
		self.outer_module.get_const(self.get_cname()).remove_def(node)
		self.module_defs.remove(node)
		self.on_module_removed(genv)

	# -- includes -----------------------------------------------------------

	def add_include_decl(self, genv: "GlobalEnv", node: "IncludeNode") -> None:
		self.include_decls.add(node)
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)

	def remove_include_decl(self, genv: "GlobalEnv", node: "IncludeNode") -> None:
		self.include_decls.remove(node)
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)

	def add_include_def(self, genv: "GlobalEnv", node: "IncludeNode") -> None:
		self.include_defs.add(node)
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)

	def remove_include_def(self, genv: "GlobalEnv", node: "IncludeNode") -> None:
		self.include_defs.remove(node)
		genv.add_static_eval_queue(StaticEvalKind.PARENT_MODULES_CHANGED, self)

	# -- ancestors ----------------------------------------------------------

	def _link_count(self, parent_id: ModuleId) -> int:
		count = 1 if self.superclass_id == parent_id else 0
		return count + sum(1 for mid in self.included_module_ids.values() if mid == parent_id)

	def update_parent(
		self,
		genv: "GlobalEnv",
		old_parent_id: Optional[ModuleId],
		new_parent_cpath: Optional[CPath],
	) -> Tuple[Optional[ModuleId], bool]:
		"""
		Resolve `new_parent_cpath` and move this module's back-reference from the
		old parent to the new one. Returns `(new_parent_id, changed)`; the caller
		stores the new id in whichever link it is updating.
		"""
		new_parent = genv.resolve_cpath(new_parent_cpath) if new_parent_cpath is not None else None
		new_parent_id = new_parent.mod_id if new_parent is not None else None
		if old_parent_id == new_parent_id:
			return new_parent_id, False
		# The same parent can be linked twice (superclass and include, or two
		# include nodes); keep the back-reference until the last link goes.
		if old_parent_id is not None and self._link_count(old_parent_id) <= 1:
			self._table.get(old_parent_id).child_module_ids.discard(self.mod_id)
		if new_parent is not None:
			new_parent.child_module_ids.add(self.mod_id)
		return new_parent_id, True

	def _find_superclass_cpath(self) -> Optional[CPath]:
		# TODO: report inconsistent superclasses across reopenings
		nodes = self.module_decls if self.module_decls else self.module_defs
		for node in nodes:
			if node.is_module:
				return None
			if node.has_superclass:
				target = node.superclass
				return ROOT_CPATH if target is None else target.cpath
		return ROOT_CPATH

	def on_parent_modules_changed(self, genv: "GlobalEnv") -> None:
		any_updated = False

		if not self._basic_object:
			new_superclass_id, updated = self.update_parent(genv, self.superclass_id, self._find_superclass_cpath())
			if updated:
				self.superclass_id = new_superclass_id
				any_updated = True

		live: Dict[Any, Optional[CPath]] = {}
		for origin in self.include_decls:
			live[origin] = _target_cpath(origin)
		for origin in self.include_defs:
			live[origin] = _target_cpath(origin)

		for origin, new_cpath in live.items():
			new_parent_id, updated = self.update_parent(genv, self.included_module_ids.get(origin), new_cpath)
			if not updated:
				continue
			if new_parent_id is None:
				if self.included_module_ids.pop(origin, None) is None:
					raise AssertionError(f"include link for {origin!r} vanished (entity bug)")
			else:
				self.included_module_ids[origin] = new_parent_id
			any_updated = True

		stale = [origin for origin in self.included_module_ids if origin not in live]
		for origin in stale:
			_, updated = self.update_parent(genv, self.included_module_ids[origin], None)
			del self.included_module_ids[origin]
			any_updated = any_updated or updated

		if any_updated:
			logger.debug("ancestors of %s changed", self.show_cpath())
			self.on_ancestors_updated(genv, None)

	def on_ancestors_updated(self, genv: "GlobalEnv", base_mod: Optional["ModuleEntity"]) -> None:
		"""
		Re-queue everything that depends on the ancestor chain of this module and
		of all its descendants. Each module is visited at most once; reaching
		`base_mod` (the module the cascade started from) again means the
		inheritance graph is circular, and that branch stops there.
		"""
		if base_mod is self:
			logger.debug("circular inheritance through %s", self.show_cpath())
			return
		guard_id = (base_mod or self).mod_id
		visited = {self.mod_id}
		stack = [self]
		while stack:
			mod = stack.pop()
			for child_id in mod.child_module_ids:
				if child_id == guard_id:
					# Object defaults to being its own superclass
					if child_id != mod.mod_id or mod.cpath:
						logger.debug("circular inheritance through %s", mod.show_cpath())
					continue
				if child_id in visited:
					continue
				visited.add(child_id)
				stack.append(self._table.get(child_id))
			mod._requeue_dependents(genv)

	def _requeue_dependents(self, genv: "GlobalEnv") -> None:
		for static_reads in self.static_reads.values():
			for static_read in static_reads:
				genv.add_static_eval_queue(StaticEvalKind.STATIC_READ_CHANGED, static_read)
		for methods in self.methods.values():
			for me in methods.values():
				for callsite in me.callsites:
					genv.add_run(callsite)
		for ivar_read in self.ivar_reads:
			genv.add_run(ivar_read)

	def each_descendant(self, base_mod: Optional["ModuleEntity"] = None) -> Iterator["ModuleEntity"]:
		"""Yield this module and every subclass/includer, each once."""
		if base_mod is self:
			return
		guard_id = (base_mod or self).mod_id
		visited = {self.mod_id}
		stack = [self]
		while stack:
			mod = stack.pop()
			yield mod
			for child_id in mod.child_module_ids:
				if child_id == guard_id or child_id in visited:
					continue
				visited.add(child_id)
				stack.append(self._table.get(child_id))

	# -- dependents -----------------------------------------------------------

	def add_static_read(self, cname: str, static_read: Any) -> None:
		reads = self.static_reads.get(cname)
		if reads is None:
			reads = self.static_reads[cname] = RefSet(what="static read")
		reads.add(static_read)

	def remove_static_read(self, cname: str, static_read: Any) -> None:
		reads = self.static_reads.get(cname)
		if reads is None:
			raise AssertionError(f"static read {static_read!r} of {cname} is not registered (caller bug)")
		reads.remove(static_read)

	def add_ivar_read(self, ivar_read: Any) -> None:
		self.ivar_reads.add(ivar_read)

	def remove_ivar_read(self, ivar_read: Any) -> None:
		self.ivar_reads.remove(ivar_read)

	# -- owned tables ---------------------------------------------------------

	def get_const(self, cname: str) -> VertexEntity:
		ce = self.consts.get(cname)
		if ce is None:
			ce = self.consts[cname] = VertexEntity(cname)
		return ce

	def get_method(self, receiver: Receiver, mid: str) -> MethodEntity:
		table = self.methods[receiver]
		me = table.get(mid)
		if me is None:
			me = table[mid] = MethodEntity()
		return me

	def get_ivar(self, receiver: Receiver, name: str) -> VertexEntity:
		table = self.ivars[receiver]
		ive = table.get(name)
		if ive is None:
			ive = table[name] = VertexEntity(name)
		return ive

	def get_type_alias(self, name: str) -> TypeAliasEntity:
		tae = self.type_aliases.get(name)
		if tae is None:
			tae = self.type_aliases[name] = TypeAliasEntity()
		return tae

	def get_vertexes(self, vtxs: List[Vertex]) -> List[Vertex]:
		"""Append the constant vertices of this module and its nested modules."""
		for inner_id in self.inner_module_ids.values():
			if inner_id == self.mod_id:  # Object::Object
				continue
			self._table.get(inner_id).get_vertexes(vtxs)
		for ce in self.consts.values():
			vtxs.append(ce.vtx)
		return vtxs

	def __repr__(self) -> str:
		return f"<ModuleEntity ::{self.show_cpath()}>"


def _params_of(decl: "ModuleNode") -> Optional[Tuple[str, ...]]:
	params = decl.params
	return None if params is None else tuple(params)


def _target_cpath(node: "IncludeNode") -> Optional[CPath]:
	target = node.target
	return None if target is None else target.cpath


__all__ = ["ModuleId", "ModuleTable", "ModuleEntity"]
