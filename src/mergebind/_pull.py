from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar, overload

from ._scope import Lazy


if TYPE_CHECKING:
    from ._container import Container

T = TypeVar("T")


class Pull(Generic[T]):
    """Class attribute resolved from a container on first access, per instance.

    Example:
      class Dependent:
          service = Pull(container, Service)

    Each instance keeps its own `Lazy` accessor, so the container is asked
    once per instance. Assigning the attribute replaces the stored value.
    """

    def __init__(self, container: Container, token: type[T]) -> None:
        self._container = container
        self._token = token
        self._name: str | None = None

    def __set_name__(self, owner: type, name: str) -> None:
        self._name = name

    @overload
    def __get__(self, obj: None, owner: type) -> Pull[T]: ...

    @overload
    def __get__(self, obj: object, owner: type) -> T: ...

    def __get__(self, obj: object | None, owner: type) -> Pull[T] | T:
        if obj is None:
            return self

        values: dict[str, Any] = obj.__dict__
        name = self._bound_name()
        accessor = values.get(name)
        if accessor is None:
            # setdefault keeps the first accessor when threads race here.
            accessor = values.setdefault(name, Lazy(lambda: self._container.resolve(self._token)))

        return accessor.value  # type: ignore[no-any-return]

    def __set__(self, obj: object, value: T) -> None:
        obj.__dict__[self._bound_name()] = Lazy(lambda: value)

    def _bound_name(self) -> str:
        if self._name is None:
            msg = "Pull must be assigned as a class attribute"
            raise TypeError(msg)
        return self._name
