# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Type lattice: the values the inference engine unifies and compares.

Every variant is an immutable dataclass. Module, Instance, Array, Hash and
Symbol compare and hash structurally, so two values built from equal
arguments are interchangeable as dict keys (a vertex keys its types this
way). Proc and RBS compare by identity: two blocks with the same shape are
still different closures, and signature types are bridged per occurrence.

Container element slots hold vertices, not types, so a literal array keeps
tracking what flows into each element.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, FrozenSet, List, Mapping, Optional, Tuple

from rbgraph.core.cpath import CPath, show_cpath
from rbgraph.core.vertex import Source, Vertex, types_of

if TYPE_CHECKING:
	from rbgraph.env.global_env import GlobalEnv

_NIL_CPATH: CPath = ("NilClass",)
# Symbols Ruby's inspect prints bare: identifiers (with an optional ?, ! or =
# suffix), @ivar/@@cvar/$gvar names, and operator method names.
_PLAIN_SYMBOL = re.compile(
	r"[A-Za-z_][A-Za-z0-9_]*[?!=]?"
	r"|@@?[A-Za-z_][A-Za-z0-9_]*"
	r"|\$[A-Za-z_][A-Za-z0-9_]*"
	r"|\[\]=?|\*\*?|[+\-]@?|<=>|<<|<=?|>>|>=?|===?|=~|!=|!~|!|[/%&|^~`]"
)


class Type:
	"""Base of all type values."""

	def base_types(self, genv: "GlobalEnv") -> List["Type"]:
		"""Nominal types used for method lookup on this value."""
		return [self]

	def show(self) -> str:
		raise NotImplementedError


@dataclass(frozen=True)
class Module(Type):
	"""The class object itself (singleton type) of the module at `cpath`."""

	cpath: CPath

	def __post_init__(self) -> None:
		if not isinstance(self.cpath, tuple):
			raise TypeError(f"cpath must be a tuple, got {type(self.cpath).__name__}")

	def get_instance_type(self) -> "Instance":
		return Instance(self.cpath)

	def show(self) -> str:
		return f"singleton({show_cpath(self.cpath)})"


@dataclass(frozen=True)
class Instance(Type):
	"""An instance of the class/module at `cpath`."""

	cpath: CPath

	def __post_init__(self) -> None:
		if not isinstance(self.cpath, tuple):
			raise TypeError(f"cpath must be a tuple, got {type(self.cpath).__name__}")

	def get_class_type(self) -> Module:
		return Module(self.cpath)

	def match(self, genv: "GlobalEnv", other: Type) -> bool:
		"""True if this instance is acceptable where `other` is expected."""
		if self == other:
			return True
		return isinstance(other, Instance) and genv.subclass(self.cpath, other.cpath)

	def show(self) -> str:
		return show_cpath(self.cpath)


@dataclass(frozen=True)
class Array(Type):
	"""
	Array value. `elems` is set for tuple-like literals whose elements are known
	one by one; otherwise only `unified_elem` is meaningful.
	"""

	elems: Optional[Tuple[Vertex, ...]]
	unified_elem: Vertex

	def __post_init__(self) -> None:
		if self.unified_elem is None:
			raise ValueError("Array requires a unified element vertex")
		if self.elems is not None and not isinstance(self.elems, tuple):
			object.__setattr__(self, "elems", tuple(self.elems))

	def get_elem(self, idx: Optional[int] = None) -> Vertex:
		if idx is not None and self.elems is not None:
			if -len(self.elems) <= idx < len(self.elems):
				return self.elems[idx]
			return Source(Instance(_NIL_CPATH))
		return self.unified_elem

	def base_types(self, genv: "GlobalEnv") -> List[Type]:
		return [Instance(genv.options.array_cpath)]

	def show(self) -> str:
		if self.elems is not None:
			return "[" + ", ".join(e.show() for e in self.elems) + "]"
		return f"Array[{self.unified_elem.show()}]"


@dataclass(frozen=True)
class Hash(Type):
	"""
	Hash value: literal key -> value vertex pairs plus the unified key/value
	vertices used for keys not known literally.

	Equality and hashing ignore the order of the literal pairs; `literal_pairs`
	keeps the order they were written in.
	"""

	literal_pairs: Tuple[Tuple[Any, Vertex], ...] = field(compare=False)
	unified_key: Vertex
	unified_val: Vertex
	_pair_set: FrozenSet[Tuple[Any, Vertex]] = field(init=False, repr=False)

	def __post_init__(self) -> None:
		# A dict is the natural way to spell literal pairs; freeze it for hashing.
		if isinstance(self.literal_pairs, Mapping):
			object.__setattr__(self, "literal_pairs", tuple(self.literal_pairs.items()))
		elif not isinstance(self.literal_pairs, tuple):
			object.__setattr__(self, "literal_pairs", tuple(self.literal_pairs))
		object.__setattr__(self, "_pair_set", frozenset(self.literal_pairs))

	def get_key(self) -> Vertex:
		return self.unified_key

	def get_value(self, key: Any = None) -> Vertex:
		if key is not None:
			for lit_key, val in self.literal_pairs:
				if lit_key == key:
					return val
		return self.unified_val

	def base_types(self, genv: "GlobalEnv") -> List[Type]:
		return [Instance(genv.options.hash_cpath)]

	def show(self) -> str:
		return f"Hash[{self.unified_key.show()}, {self.unified_val.show()}]"


@dataclass(frozen=True, eq=False)
class Proc(Type):
	"""A callable value; `block` is the solver's block descriptor."""

	block: Any

	def base_types(self, genv: "GlobalEnv") -> List[Type]:
		return [Instance(genv.options.proc_cpath)]

	def show(self) -> str:
		return "<Proc>"


@dataclass(frozen=True)
class Symbol(Type):
	sym: str

	def base_types(self, genv: "GlobalEnv") -> List[Type]:
		return [Instance(genv.options.symbol_cpath)]

	def show(self) -> str:
		if _PLAIN_SYMBOL.fullmatch(self.sym):
			return f":{self.sym}"
		escaped = self.sym.replace("\\", "\\\\").replace('"', '\\"')
		return f':"{escaped}"'


@dataclass(frozen=True, eq=False)
class RBS(Type):
	"""
	Bridge to a signature-file type expression. Its base types are whatever the
	signature resolver produces for it, expanded on demand.
	"""

	rbs_type: Any

	def base_types(self, genv: "GlobalEnv") -> List[Type]:
		return types_of(genv.resolve_signature_type(self.rbs_type, {}))

	def show(self) -> str:
		return str(self.rbs_type)

	def __repr__(self) -> str:
		return "RBS(...)"


__all__ = ["Type", "Module", "Instance", "Array", "Hash", "Proc", "Symbol", "RBS"]
