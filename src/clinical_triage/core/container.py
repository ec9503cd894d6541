"""Service container wiring stores, loaders, and the refresh scheduler."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar, overload

T = TypeVar("T")

Factory = Callable[["ServiceContainer"], Any]


class ServiceContainer:
    """Lazily built, per-application singletons keyed by name.

    Each container owns its own instances, so two applications built in the
    same process never share a store.
    """

    def __init__(self) -> None:
        self._factories: dict[str, Factory] = {}
        self._instances: dict[str, Any] = {}

    def register(self, key: str, factory: Factory) -> None:
        """Register ``factory`` under ``key``, discarding any built instance."""
        self._factories[key] = factory
        self._instances.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._factories

    @overload
    def resolve(self, key: str) -> Any: ...

    @overload
    def resolve(self, key: str, expected: type[T]) -> T: ...

    def resolve(self, key: str, expected: type[Any] | None = None) -> Any:
        """Build (once) and return the service registered under ``key``.

        When ``expected`` is given the instance must be of that type.
        """
        if key not in self._instances:
            try:
                factory = self._factories[key]
            except KeyError:
                raise KeyError(f"Service '{key}' is not registered") from None
            self._instances[key] = factory(self)
        instance = self._instances[key]
        if expected is not None and not isinstance(instance, expected):
            raise TypeError(
                f"Service '{key}' is {type(instance).__name__}, "
                f"expected {expected.__name__}"
            )
        return instance


__all__ = ["ServiceContainer"]
