from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Generic, TypeVar, cast


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._container import Container

    Builder = Callable[[Container], object]

T = TypeVar("T")


class Once(Generic[T]):
    """Run a producer exactly once and hand every caller the same result.

    Concurrent first callers block on the lock until the winning call has
    stored its result. If the producer raises, nothing is stored and the
    next call tries again.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._done = False
        self._value: T | None = None

    @property
    def done(self) -> bool:
        return self._done

    def get(self, produce: Callable[[], T]) -> T:
        if self._done:
            return cast("T", self._value)

        with self._lock:
            if not self._done:
                self._value = produce()
                self._done = True

        return cast("T", self._value)


class ResolutionScope:
    """Wraps a builder and decides how often it runs."""

    def __init__(self, builder: Builder) -> None:
        self.builder = builder

    def build(self, container: Container) -> object:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.builder!r})"


class FactoryScope(ResolutionScope):
    """Invoke the builder on every resolve (transient lifetime)."""

    def build(self, container: Container) -> object:
        return self.builder(container)


class SingletonScope(ResolutionScope):
    """Invoke the builder on first resolve only, then return the cached instance."""

    def __init__(self, builder: Builder) -> None:
        super().__init__(builder)
        self._once: Once[object] = Once()

    @property
    def populated(self) -> bool:
        return self._once.done

    def build(self, container: Container) -> object:
        return self._once.get(lambda: self._populate(container))

    def _populate(self, container: Container) -> object:
        instance = self.builder(container)
        logger.debug("singleton populated with %s", type(instance).__qualname__)
        return instance


class Lazy(Generic[T]):
    """Deferred value: `produce` runs on first access and is remembered.

    Example:
      settings = container.lazy(Settings)
      ...
      settings().debug  # resolved here, once

    """

    def __init__(self, produce: Callable[[], T]) -> None:
        self._produce = produce
        self._once: Once[T] = Once()

    @property
    def evaluated(self) -> bool:
        return self._once.done

    @property
    def value(self) -> T:
        return self._once.get(self._produce)

    def __call__(self) -> T:
        return self.value

    def __repr__(self) -> str:
        state = repr(self._once.get(self._produce)) if self._once.done else "<pending>"
        return f"Lazy({state})"
