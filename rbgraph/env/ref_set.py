# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Insertion-ordered set of node references.

Entity bookkeeping must mirror the live declaration graph exactly, so
`remove` of a reference that was never added is a caller bug and raises
AssertionError. First-wins tie-breaks scan in arrival order, which a plain
`set` of arbitrary objects does not give us.
"""

from __future__ import annotations

from typing import Dict, Generic, Iterable, Iterator, Optional, TypeVar

T = TypeVar("T")


class RefSet(Generic[T]):
	__slots__ = ("_items", "_what")

	def __init__(self, items: Iterable[T] = (), *, what: str = "reference") -> None:
		self._items: Dict[T, None] = dict.fromkeys(items)
		self._what = what

	def add(self, item: T) -> None:
		self._items[item] = None

	def remove(self, item: T) -> None:
		try:
			del self._items[item]
		except KeyError:
			raise AssertionError(f"{self._what} {item!r} is not registered (caller bug)") from None

	def discard(self, item: T) -> None:
		self._items.pop(item, None)

	def first(self) -> Optional[T]:
		return next(iter(self._items), None)

	def __contains__(self, item: object) -> bool:
		return item in self._items

	def __iter__(self) -> Iterator[T]:
		return iter(self._items)

	def __len__(self) -> int:
		return len(self._items)

	def __bool__(self) -> bool:
		return bool(self._items)

	def __repr__(self) -> str:
		return f"RefSet({list(self._items)!r})"


__all__ = ["RefSet"]
