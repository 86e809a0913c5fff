# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Inference-graph nodes.

A `Vertex` accumulates type values together with the sources that contributed
them; the solver owns the edges, this layer only owns the storage and the
rendering. A `Source` is a vertex with a fixed type set (literals, defaults).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Dict, Iterable, List, Sequence, Set

if TYPE_CHECKING:
	from rbgraph.core.types_core import Type

# Vertices currently being rendered; element types can refer back to their
# container (e.g. an array holding itself).
_SHOWING: Set[int] = set()


class Vertex:
	def __init__(self, show_name: str, origin: object = None) -> None:
		self.show_name = show_name
		self.origin = origin
		# type -> set of sources that contributed it
		self.types: Dict["Type", Set[object]] = {}

	def add_type(self, ty: "Type", source: object = None) -> bool:
		"""Record `ty` from `source`; return True if the type is new to this vertex."""
		sources = self.types.get(ty)
		if sources is None:
			self.types[ty] = {source}
			return True
		sources.add(source)
		return False

	def remove_type(self, ty: "Type", source: object = None) -> bool:
		"""
		Drop one contribution of `ty`; return True once no source is left and the
		type disappeared from the vertex.
		"""
		sources = self.types.get(ty)
		if sources is None or source not in sources:
			raise AssertionError(f"{ty!r} from {source!r} is not on vertex {self.show_name} (solver bug)")
		sources.remove(source)
		if sources:
			return False
		del self.types[ty]
		return True

	def show(self) -> str:
		key = id(self)
		if not self.types or key in _SHOWING:
			return "untyped"
		_SHOWING.add(key)
		try:
			shown: Dict[str, None] = {}
			for ty in self.types:
				shown.setdefault(ty.show(), None)
			return " | ".join(shown)
		finally:
			_SHOWING.discard(key)

	def __repr__(self) -> str:
		return f"<Vertex {self.show_name}: {self.show()}>"


class Source(Vertex):
	"""Vertex whose types are fixed at construction."""

	def __init__(self, *tys: "Type") -> None:
		super().__init__("source")
		for ty in tys:
			self.types.setdefault(ty, set())

	def __repr__(self) -> str:
		return f"<Source {self.show()}>"


def show_method_sig(mid: str, params: Sequence[Vertex], ret: Vertex) -> str:
	"""Render one method definition as `def mid: (P1, P2) -> R`."""
	args = ", ".join(p.show() for p in params)
	return f"def {mid}: ({args}) -> {ret.show()}"


def types_of(vtxs: Iterable[Vertex]) -> List["Type"]:
	"""Union of the types carried by `vtxs`, de-duplicated in arrival order."""
	seen: Dict["Type", None] = {}
	for vtx in vtxs:
		for ty in vtx.types:
			seen.setdefault(ty, None)
	return list(seen)


__all__ = ["Vertex", "Source", "show_method_sig", "types_of"]
