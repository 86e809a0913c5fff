# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Class paths: the name-segment tuples that identify modules globally."""

from __future__ import annotations

from typing import Iterable, Tuple

CPath = Tuple[str, ...]  # () is the root namespace, i.e. Object

ROOT_CPATH: CPath = ()


def show_cpath(cpath: CPath) -> str:
	"""Render a cpath the way signatures spell it (`A::B`, `Object` for the root)."""
	return "::".join(cpath) if cpath else "Object"


def cname_of(cpath: CPath) -> str:
	"""Last segment of the path; the root is named `Object`."""
	return cpath[-1] if cpath else "Object"


def as_cpath(path: str | Iterable[str]) -> CPath:
	"""
	Normalize `"A::B"` or `["A", "B"]` into a CPath tuple.

	`""` and `"Object"` both denote the root. A leading `::` is accepted.
	"""
	if isinstance(path, str):
		text = path[2:] if path.startswith("::") else path
		if text in ("", "Object"):
			return ROOT_CPATH
		segments = tuple(text.split("::"))
	else:
		segments = tuple(path)
	for seg in segments:
		if not isinstance(seg, str) or not seg:
			raise ValueError(f"invalid cpath segment {seg!r} in {path!r}")
	return segments


__all__ = ["CPath", "ROOT_CPATH", "show_cpath", "cname_of", "as_cpath"]
