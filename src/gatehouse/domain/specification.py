"""Composable business-rule predicates.

A ``Specification`` wraps a plain predicate so rules can be named, combined
with ``&``, ``|`` and ``~`` and evaluated with ``is_satisfied_by`` or by
calling the specification directly.
"""
from __future__ import annotations

from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class Specification(Generic[T]):
    __slots__ = ("_predicate", "name")

    def __init__(self, predicate: Callable[[T], bool], name: str = "specification") -> None:
        self._predicate = predicate
        self.name = name

    def is_satisfied_by(self, candidate: T) -> bool:
        return bool(self._predicate(candidate))

    def __call__(self, candidate: T) -> bool:
        return self.is_satisfied_by(candidate)

    def and_(self, other: Specification[T]) -> Specification[T]:
        return Specification(
            lambda c: self.is_satisfied_by(c) and other.is_satisfied_by(c),
            f"({self.name} and {other.name})",
        )

    def or_(self, other: Specification[T]) -> Specification[T]:
        return Specification(
            lambda c: self.is_satisfied_by(c) or other.is_satisfied_by(c),
            f"({self.name} or {other.name})",
        )

    def not_(self) -> Specification[T]:
        return Specification(lambda c: not self.is_satisfied_by(c), f"not {self.name}")

    __and__ = and_
    __or__ = or_
    __invert__ = not_

    def __repr__(self) -> str:
        return f"Specification({self.name})"
