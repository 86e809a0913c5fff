# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Shared helpers for tests that need decl/def nodes.

The real front-end hands the entity layer AST nodes; these stand-ins carry
just the fields the capability protocols in `rbgraph.env.nodes` promise and
compare by identity, like AST nodes do.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence, Tuple

from rbgraph.core.cpath import CPath, as_cpath
from rbgraph.core.type_syntax import parse_type
from rbgraph.core.types_core import Type
from rbgraph.core.vertex import Vertex


@dataclass(eq=False)
class FakeStaticRef:
	cpath: Optional[CPath]


@dataclass(eq=False)
class FakeModuleNode:
	is_module: bool = False
	params: Optional[Tuple[str, ...]] = ()
	superclass_args: Optional[Tuple[Any, ...]] = None
	has_superclass: bool = False
	superclass: Optional[FakeStaticRef] = None
	label: str = ""

	def __repr__(self) -> str:
		return f"<node {self.label or id(self)}>"


@dataclass(eq=False)
class FakeIncludeNode:
	target: Optional[FakeStaticRef]

	def __repr__(self) -> str:
		return f"<include {self.target.cpath if self.target else None}>"


@dataclass(eq=False)
class FakeTypeAliasNode:
	type: Type


@dataclass(eq=False)
class FakeDependent:
	"""Callsite / static read / ivar read placeholder; the tests only track identity."""

	name: str


@dataclass(eq=False)
class FakeMethodDef:
	params: List[Vertex] = field(default_factory=list)
	ret: Vertex = field(default_factory=lambda: Vertex("ret"))


def class_node(
	superclass: str | Sequence[str] | None = None,
	*,
	params: Optional[Sequence[str]] = (),
	superclass_args: Optional[Tuple[Any, ...]] = None,
	unresolved: bool = False,
	label: str = "",
) -> FakeModuleNode:
	"""
	A class-like node. `superclass` names the resolved target; `unresolved`
	spells an explicit superclass whose lookup has no result yet.
	"""
	if unresolved:
		return FakeModuleNode(params=_params(params), superclass_args=superclass_args, has_superclass=True, label=label)
	if superclass is None:
		return FakeModuleNode(params=_params(params), superclass_args=superclass_args, label=label)
	return FakeModuleNode(
		params=_params(params),
		superclass_args=superclass_args,
		has_superclass=True,
		superclass=FakeStaticRef(as_cpath(superclass)),
		label=label,
	)


def module_node(*, params: Optional[Sequence[str]] = (), label: str = "") -> FakeModuleNode:
	return FakeModuleNode(is_module=True, params=_params(params), label=label)


def include_node(target: str | Sequence[str] | None) -> FakeIncludeNode:
	return FakeIncludeNode(None if target is None else FakeStaticRef(as_cpath(target)))


def type_alias_node(text: str) -> FakeTypeAliasNode:
	return FakeTypeAliasNode(parse_type(text))


def _params(params: Optional[Sequence[str]]) -> Optional[Tuple[str, ...]]:
	return None if params is None else tuple(params)


__all__ = [
	"FakeStaticRef",
	"FakeModuleNode",
	"FakeIncludeNode",
	"FakeTypeAliasNode",
	"FakeDependent",
	"FakeMethodDef",
	"class_node",
	"module_node",
	"include_node",
	"type_alias_node",
]
