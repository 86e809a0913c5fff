# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
The environment entities talk to.

`GlobalEnv` is the protocol the entity layer consumes: cpath resolution, the
nominal subclass test, the two work queues and the signature-type resolver.
`InMemoryGlobalEnv` is a plain implementation of it: it owns the ModuleTable,
keeps both queues in memory and knows how to dispatch the module-level
static-eval events back to the entities. Deciding *when* to drain the queues
is left to the caller.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Protocol, Set, Tuple

from rbgraph.core.cpath import CPath
from rbgraph.core.options import DEFAULT_OPTIONS, EnvOptions
from rbgraph.core.vertex import Vertex, show_method_sig
from rbgraph.env.kinds import Receiver, StaticEvalKind
from rbgraph.env.module_entity import ModuleEntity, ModuleTable

logger = logging.getLogger(__name__)

# (genv, rbs_type, param_map) -> vertices carrying the expanded types
SignatureResolver = Callable[["GlobalEnv", Any, Dict[Any, Any]], Iterable[Vertex]]


class MissingSignatureResolver(RuntimeError):
	"""Signature types were requested from an env that has no resolver installed."""


class GlobalEnv(Protocol):
	options: EnvOptions

	def resolve_cpath(self, cpath: CPath) -> ModuleEntity:
		...

	def subclass(self, cpath_a: CPath, cpath_b: CPath) -> bool:
		"""True if `cpath_a` is `cpath_b` or inherits from it."""
		...

	def add_static_eval_queue(self, kind: StaticEvalKind, payload: Any) -> None:
		...

	def add_run(self, target: Any) -> None:
		"""Ask for `target` (a callsite, method def, ivar read, ...) to be recomputed."""
		...

	def resolve_signature_type(self, rbs_type: Any, param_map: Dict[Any, Any]) -> Iterable[Vertex]:
		...


class InMemoryGlobalEnv:
	def __init__(
		self,
		options: EnvOptions | None = None,
		*,
		signature_resolver: Optional[SignatureResolver] = None,
	) -> None:
		self.options = options or DEFAULT_OPTIONS
		self.modules = ModuleTable(self.options)
		self.static_eval_queue: Deque[Tuple[StaticEvalKind, Any]] = deque()
		self.run_queue: Deque[Any] = deque()
		self._run_queue_set: Set[Any] = set()
		self._signature_resolver = signature_resolver

	@property
	def mod_object(self) -> ModuleEntity:
		return self.modules.root

	def resolve_cpath(self, cpath: CPath) -> ModuleEntity:
		return self.modules.ensure(cpath)

	def subclass(self, cpath_a: CPath, cpath_b: CPath) -> bool:
		# read-only: unknown paths are not allocated
		mod: Optional[ModuleEntity] = self.modules.lookup(cpath_a)
		seen: Set[int] = set()
		while mod is not None and mod.mod_id not in seen:
			if mod.cpath == cpath_b:
				return True
			seen.add(mod.mod_id)
			mod = mod.superclass
		return False

	def add_static_eval_queue(self, kind: StaticEvalKind, payload: Any) -> None:
		logger.debug("static eval queued: %s %r", kind.value, payload)
		self.static_eval_queue.append((kind, payload))

	def add_run(self, target: Any) -> None:
		if target in self._run_queue_set:
			return
		self._run_queue_set.add(target)
		self.run_queue.append(target)

	def take_runs(self) -> List[Any]:
		"""Drain the run queue, oldest first."""
		runs = list(self.run_queue)
		self.run_queue.clear()
		self._run_queue_set.clear()
		return runs

	def run_static_evals(self) -> List[Any]:
		"""
		Drain the static-eval queue until it is empty.

		Module events are dispatched to their entities (which may queue more
		events; those are drained too). Static reads that need re-resolving are
		returned, in queue order, for the caller's resolver to handle.
		"""
		changed_reads: List[Any] = []
		while self.static_eval_queue:
			kind, payload = self.static_eval_queue.popleft()
			if kind is StaticEvalKind.INNER_MODULES_CHANGED:
				outer, cname = payload
				outer.on_inner_modules_changed(self, cname)
			elif kind is StaticEvalKind.PARENT_MODULES_CHANGED:
				payload.on_parent_modules_changed(self)
			elif kind is StaticEvalKind.STATIC_READ_CHANGED:
				changed_reads.append(payload)
			else:
				raise AssertionError(f"unknown static eval kind {kind!r}")
		return changed_reads

	def resolve_signature_type(self, rbs_type: Any, param_map: Dict[Any, Any]) -> Iterable[Vertex]:
		if self._signature_resolver is None:
			raise MissingSignatureResolver("no signature resolver installed on this env; pass signature_resolver= to InMemoryGlobalEnv")
		return self._signature_resolver(self, rbs_type, param_map)

	def get_method_sig(self, cpath: CPath, receiver: Receiver, mid: str) -> List[str]:
		"""Render every current definition of a method as `def mid: (...) -> ...`."""
		mod = self.modules.lookup(cpath)
		if mod is None:
			return []
		me = mod.methods[receiver].get(mid)
		if me is None:
			return []
		return [show_method_sig(mid, mdef.params, mdef.ret) for mdef in me.defs]


__all__ = ["GlobalEnv", "InMemoryGlobalEnv", "MissingSignatureResolver", "SignatureResolver"]
