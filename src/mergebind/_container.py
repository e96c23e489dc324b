from __future__ import annotations

import inspect
import logging
import typing
from typing import (
    TYPE_CHECKING,
    Any,
    Protocol,
    TypeVar,
    Union,
    cast,
    get_type_hints,
    overload,
)

from ._registry import Registry
from ._scope import FactoryScope, Lazy, ResolutionScope, SingletonScope


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    T = TypeVar("T")

    BuilderLike = Union[Callable[["Container"], T], Callable[[], T]]


class ResolutionError(RuntimeError):
    pass


class UnregisteredTypeError(ResolutionError):
    """Raised when a type is resolved from a container that has no registration for it.

    This points at a wiring mistake, so there is no fallback: the caller decides
    whether it is fatal. The requested type is available as `token`.
    """

    def __init__(self, token: type) -> None:
        self.token = token
        super().__init__(f"No registration found for type: {_type_name(token)}")


class Container:
    """Immutable bundle of registrations.

    - resolve an instance by its type
    - merge with another container (right-hand side wins)
    - builders receive the container they are resolved through, so they can
      resolve their own dependencies in any registration order.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: Registry | None = None) -> None:
        self._registry = registry if registry is not None else Registry.empty()

    @property
    def registry(self) -> Registry:
        return self._registry

    def resolve(self, token: type[T]) -> T:
        """Resolve the type to an instance using its registered scope.

        Raises `UnregisteredTypeError` when nothing is registered for `token`.
        """
        scope = self._registry.get(token)
        if scope is None:
            raise UnregisteredTypeError(token)

        return cast("T", scope.build(self))

    def merge(self, other: Container) -> Container:
        """Return a new container with the registrations of both.

        Neither operand is modified. Where both register the same type, the
        registration from `other` is kept.
        """
        if not isinstance(other, Container):
            msg = f"Can only merge with a Container, not {type(other).__name__}"
            raise TypeError(msg)

        return Container(Registry.merge(self._registry, other._registry))

    def lazy(self, token: type[T]) -> Lazy[T]:
        """Defer resolving `token` until the returned accessor is first called."""
        return Lazy(lambda: self.resolve(token))

    def registered_types(self) -> frozenset[type]:
        return frozenset(self._registry)

    # `a += b` has no in-place form and rebinds `a` to `a + b`.
    def __add__(self, other: object) -> Container:
        if not isinstance(other, Container):
            return NotImplemented
        return self.merge(other)

    def __getitem__(self, token: type[T]) -> T:
        return self.resolve(token)

    def __contains__(self, token: object) -> bool:
        return token in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def __repr__(self) -> str:
        return f"Container({self._registry!r})"


def empty_container() -> Container:
    return Container()


@overload
def singleton(token: type[T], builder: Callable[[Container], T]) -> Container: ...


@overload
def singleton(token: type[T], builder: Callable[[], T] | None = ...) -> Container: ...


def singleton(token: type[T], builder: BuilderLike[T] | None = None) -> Container:
    """Register `token` so that its builder runs once and the result is shared.

    Example:
      container = singleton(Database, lambda c: Database(c.resolve(Settings)))
      container.resolve(Database) is container.resolve(Database)  # True

    Without a builder, `token()` is called with no arguments.
    """
    return _register(token, SingletonScope(_as_builder(token, builder)))


@overload
def factory(token: type[T], builder: Callable[[Container], T]) -> Container: ...


@overload
def factory(token: type[T], builder: Callable[[], T] | None = ...) -> Container: ...


def factory(token: type[T], builder: BuilderLike[T] | None = None) -> Container:
    """Register `token` so that every resolve runs its builder and returns a new instance."""
    return _register(token, FactoryScope(_as_builder(token, builder)))


def instance(obj: object, token: type | None = None) -> Container:
    """Register a pre-built object as a singleton, keyed by `token` or by its own type."""
    key = token if token is not None else type(obj)
    _validate_token(key)
    _validate_instance(key, obj)
    return _register(key, SingletonScope(lambda _: obj))


def resolve(container: Container, token: type[T]) -> T:
    return container.resolve(token)


def _register(token: type, scope: ResolutionScope) -> Container:
    return Container(Registry.single(token, scope))


def _as_builder(token: type, builder: Callable[..., Any] | None) -> Callable[[Container], object]:
    """Normalise a builder to the `(container) -> instance` shape.

    Zero-argument builders are wrapped to ignore the container. The builder's
    return annotation, when it names a class, is checked against `token` here
    so that resolve never has to check it.
    """
    _validate_token(token)

    if builder is None:
        _validate_bare_constructor(token, token)
        return lambda _: token()

    if not callable(builder):
        msg = f"Builder for {_type_name(token)} must be callable, got {type(builder).__name__}"
        raise TypeError(msg)

    _validate_return_type(token, builder)

    if inspect.isclass(builder):
        _validate_bare_constructor(token, builder)
        return lambda _: builder()

    if _takes_container(token, builder):
        return builder

    return lambda _: builder()


def _validate_bare_constructor(token: type, cls: type) -> None:
    """Classes used as builders are called with no arguments, never with the container."""
    try:
        params = inspect.signature(cls).parameters.values()
    except (TypeError, ValueError):
        return

    required = [
        p.name
        for p in params
        if p.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    if required:
        msg = (
            f"Class builder {cls.__qualname__} for {_type_name(token)} requires {', '.join(required)}; "
            f"pass a builder that resolves them, e.g. `lambda c: {cls.__qualname__}(c.resolve(...))`"
        )
        raise TypeError(msg)


def _takes_container(token: type, builder: Callable[..., Any]) -> bool:
    try:
        params = inspect.signature(builder).parameters.values()
    except (TypeError, ValueError):
        # No signature available (some builtins): assume the documented shape.
        return True

    required = [
        p
        for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
        and p.default is inspect.Parameter.empty
    ]
    required_kw = [
        p for p in params if p.kind is inspect.Parameter.KEYWORD_ONLY and p.default is inspect.Parameter.empty
    ]

    if len(required) > 1 or required_kw:
        msg = (
            f"Builder for {_type_name(token)} must accept the container or no arguments; "
            f"it requires {', '.join(p.name for p in required + required_kw)}"
        )
        raise TypeError(msg)

    return len(required) == 1 or any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params)


def _validate_token(token: object) -> None:
    if not inspect.isclass(token):
        msg = f"Registrations are keyed by type, got {token!r}"
        raise TypeError(msg)


def _validate_instance(token: type, obj: object) -> None:
    if _is_protocol(token) and not _is_runtime_checkable_protocol(token):
        # Only runtime-checkable protocols support isinstance.
        return

    if not isinstance(obj, token):
        msg = f"Instance of {type(obj).__name__} is not an instance of {_type_name(token)}"
        raise TypeError(msg)


def _validate_return_type(token: type, builder: Callable[..., Any]) -> None:
    if inspect.isclass(builder):
        declared: object = builder
    else:
        declared = _get_return_type_hint(builder)

    if not inspect.isclass(declared) or declared is Any or declared is object or _is_protocol(token):
        # Any and object promise nothing narrower; the builder is trusted.
        return

    if not issubclass(cast("type", declared), token):
        msg = f"Builder for {_type_name(token)} declares return type {_type_name(declared)}"
        raise TypeError(msg)


def _get_return_type_hint(builder: Callable[..., Any]) -> object:
    try:
        hints = get_type_hints(builder)
    except TypeError:
        hints = {}
    except NameError as exc:
        logger.warning("'%s' name error retrieving %r return type hint", exc.name, builder)
        hints = {}

    return hints.get("return")


def _is_runtime_checkable_protocol(tp: type) -> bool:
    try:
        isinstance(None, tp)
    except TypeError:
        return False
    else:
        return True


def _type_name(tp: object) -> str:
    return getattr(tp, "__qualname__", None) or repr(tp)


if hasattr(typing, "is_protocol"):
    # https://docs.python.org/3/library/typing.html#typing.is_protocol
    def _is_protocol(tp: type) -> bool:
        return inspect.isclass(tp) and typing.is_protocol(tp)

else:

    def _is_protocol(tp: type) -> bool:
        # Protocol classes set `_is_protocol` themselves; concrete subclasses reset it.
        return inspect.isclass(tp) and tp is not Protocol and bool(getattr(tp, "_is_protocol", False))
