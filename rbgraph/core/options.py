# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Environment options: the well-known class paths the entity layer and the
type lattice treat specially.

Defaults match the Ruby core hierarchy. Hosts that load their configuration
from JSON can go through `EnvOptions.from_mapping`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping

from rbgraph.core.cpath import CPath, as_cpath


@dataclass(frozen=True)
class EnvOptions:
	# Root of all objects; never gets a superclass assigned.
	basic_object_cpath: CPath = ("BasicObject",)
	array_cpath: CPath = ("Array",)
	hash_cpath: CPath = ("Hash",)
	proc_cpath: CPath = ("Proc",)
	symbol_cpath: CPath = ("Symbol",)

	@classmethod
	def from_mapping(cls, data: Mapping[str, Any]) -> "EnvOptions":
		"""
		Build options from a plain mapping, e.g. a parsed JSON config object.

		Values may be `"A::B"` strings or segment lists. Unknown keys are
		rejected so typos do not silently fall back to defaults.
		"""
		known = {f.name for f in fields(cls)}
		unknown = sorted(set(data) - known)
		if unknown:
			raise ValueError(f"unknown env option(s): {', '.join(unknown)}")
		return cls(**{name: as_cpath(value) for name, value in data.items()})


DEFAULT_OPTIONS = EnvOptions()


__all__ = ["EnvOptions", "DEFAULT_OPTIONS"]
