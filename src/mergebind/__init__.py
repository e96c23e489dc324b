"""Minimal mergeable dependency injection containers.

Containers are immutable bundles of registrations keyed by type. Single-entry
containers are built with `singleton`, `factory` or `instance` and combined with
`merge` (or `+`), the right-hand side winning when both register the same type.
Builders receive the merged container, so they can resolve their own
dependencies regardless of registration order.

Exports:
- `Container`: resolve-by-type and merge.
- `empty_container`, `singleton`, `factory`, `instance`: container constructors.
- `resolve`: function form of `Container.resolve`.
- `Lazy`, `Pull`: deferred resolution helpers built on the same resolve call.
- `ResolutionError`, `UnregisteredTypeError`: raised when a type is not registered.
"""

from ._container import (
    Container,
    ResolutionError,
    UnregisteredTypeError,
    empty_container,
    factory,
    instance,
    resolve,
    singleton,
)
from ._pull import Pull
from ._registry import Registry
from ._scope import FactoryScope, Lazy, Once, ResolutionScope, SingletonScope


__all__ = [
    "Container",
    "FactoryScope",
    "Lazy",
    "Once",
    "Pull",
    "Registry",
    "ResolutionError",
    "ResolutionScope",
    "SingletonScope",
    "UnregisteredTypeError",
    "empty_container",
    "factory",
    "instance",
    "resolve",
    "singleton",
]
