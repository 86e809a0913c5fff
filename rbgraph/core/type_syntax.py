# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Reader for the canonical type rendering produced by `Type.show`.

Accepted forms:
  Object, A::B             -> Instance
  singleton(A::B)          -> Module
  :name, :"odd name"       -> Symbol
  [A, B | C]               -> literal Array (elements become Sources)
  Array[T], Hash[K, V]     -> unified Array / Hash
  Other[...]               -> Instance (type arguments are not tracked)
  <Proc>                   -> Proc with no block
  A | B                    -> union (parse_types only)

Used by hosts and tests to spell expected or declared types as text.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List

from lark import Lark, Transformer
from lark.exceptions import UnexpectedInput, VisitError

from rbgraph.core.cpath import ROOT_CPATH, CPath
from rbgraph.core.options import DEFAULT_OPTIONS
from rbgraph.core.types_core import Array, Hash, Instance, Module, Proc, Symbol, Type
from rbgraph.core.vertex import Source

_GRAMMAR_PATH = Path(__file__).with_name("type_syntax.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="basic",
	start="union",
	maybe_placeholders=False,
)

_ESCAPE = re.compile(r"\\(.)")


class TypeSyntaxError(ValueError):
	"""Malformed type text; `column` is 1-based when the lexer/parser knows it."""

	def __init__(self, message: str, *, column: int | None = None) -> None:
		super().__init__(message)
		self.column = column


def _source(tys: List[Type]) -> Source:
	return Source(*tys)


def _root_aware(cpath: CPath) -> CPath:
	# `Object` is how the root renders; read it back as the root path.
	return ROOT_CPATH if cpath == ("Object",) else cpath


class _TypeBuilder(Transformer):
	def union(self, children: list) -> List[Type]:
		return list(children)

	def cpath(self, children: list) -> CPath:
		return _root_aware(tuple(str(tok) for tok in children))

	def nominal_type(self, children: list) -> Type:
		return Instance(children[0])

	def singleton_type(self, children: list) -> Type:
		return Module(children[0])

	def symbol_type(self, children: list) -> Type:
		text = str(children[0])[1:]
		if text.startswith('"'):
			text = _ESCAPE.sub(r"\1", text[1:-1])
		return Symbol(text)

	def proc_type(self, children: list) -> Type:
		return Proc(None)

	def tuple_type(self, children: list) -> Type:
		elems = tuple(_source(u) for u in children)
		unified: dict = {}
		for u in children:
			for ty in u:
				unified.setdefault(ty, None)
		return Array(elems, Source(*unified))

	def generic_type(self, children: list) -> Type:
		cpath, args = children[0], children[1:]
		if cpath == DEFAULT_OPTIONS.array_cpath:
			if len(args) != 1:
				raise ValueError(f"Array takes 1 type argument, got {len(args)}")
			return Array(None, _source(args[0]))
		if cpath == DEFAULT_OPTIONS.hash_cpath:
			if len(args) != 2:
				raise ValueError(f"Hash takes 2 type arguments, got {len(args)}")
			return Hash((), _source(args[0]), _source(args[1]))
		return Instance(cpath)


def parse_types(text: str) -> List[Type]:
	"""Parse a (possibly `|`-joined) type expression into its member types."""
	try:
		tree = _PARSER.parse(text)
	except UnexpectedInput as err:
		raise TypeSyntaxError(f"invalid type expression {text!r}: {err}", column=getattr(err, "column", None)) from err
	try:
		return _TypeBuilder().transform(tree)
	except VisitError as err:
		raise TypeSyntaxError(f"invalid type expression {text!r}: {err.orig_exc}") from err


def parse_type(text: str) -> Type:
	"""Parse exactly one type; unions are rejected."""
	tys = parse_types(text)
	if len(tys) != 1:
		raise TypeSyntaxError(f"expected a single type, got a union of {len(tys)} in {text!r}")
	return tys[0]


__all__ = ["TypeSyntaxError", "parse_types", "parse_type"]
