# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from enum import Enum, auto


class Receiver(Enum):
	"""Which side of a module a method/ivar table belongs to."""

	INSTANCE = auto()
	SINGLETON = auto()

	@staticmethod
	def of(singleton: bool) -> "Receiver":
		return Receiver.SINGLETON if singleton else Receiver.INSTANCE


class StaticEvalKind(Enum):
	"""Events the entity layer puts on the scheduler's static-eval queue."""

	# payload: (outer ModuleEntity, cname)
	INNER_MODULES_CHANGED = "inner_modules_changed"
	# payload: ModuleEntity whose ancestors must be re-derived
	PARENT_MODULES_CHANGED = "parent_modules_changed"
	# payload: the static read that must be re-resolved
	STATIC_READ_CHANGED = "static_read_changed"


__all__ = ["Receiver", "StaticEvalKind"]
