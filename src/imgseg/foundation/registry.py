"""
Name lookup for configurable components (crossover, mutation, parent selection).

Names coming from config files are matched case-insensitively, and an unknown
name raises ``InvalidOperatorError`` listing what is available.
"""

from __future__ import annotations

from typing import Any, Callable, Generic, Iterator, Mapping, TypeVar

from .exceptions import InvalidOperatorError

T = TypeVar("T")


def _normalize(name: str) -> str:
    return str(name).strip().lower().replace("-", "_")


class Registry(Generic[T]):
    """Factories keyed by component name, for one kind of component."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._factories: dict[str, Callable[..., T]] = {}

    def register(self, name: str, factory: Callable[..., T]) -> Callable[..., T]:
        key = _normalize(name)
        if key in self._factories:
            raise ValueError(f"{self.kind} '{key}' is already registered.")
        self._factories[key] = factory
        return factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def factory(self, name: str) -> Callable[..., T]:
        key = _normalize(name or "")
        if key not in self._factories:
            raise InvalidOperatorError(self.kind, name, self.names())
        return self._factories[key]

    def create(self, name: str, params: Mapping[str, Any] | None = None) -> T:
        """Build the component registered under ``name`` with ``params`` as keyword arguments."""
        return self.factory(name)(**dict(params or {}))

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and _normalize(name) in self._factories

    def __iter__(self) -> Iterator[str]:
        return iter(self.names())

    def __len__(self) -> int:
        return len(self._factories)


__all__ = ["Registry"]
