from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from ._scope import ResolutionScope


class Registry(Mapping[type, "ResolutionScope"]):
    """Immutable mapping from a type to the scope that produces it.

    Registries are never changed after construction; `merge` builds a new one.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[type, ResolutionScope] | None = None) -> None:
        self._entries: dict[type, ResolutionScope] = dict(entries or {})

    @classmethod
    def empty(cls) -> Registry:
        return cls()

    @classmethod
    def single(cls, token: type, scope: ResolutionScope) -> Registry:
        return cls({token: scope})

    @staticmethod
    def merge(base: Registry, overlay: Registry) -> Registry:
        """Union of both registries; `overlay` wins where a type is in both."""
        merged = dict(base._entries)  # noqa: SLF001
        for token, scope in overlay._entries.items():  # noqa: SLF001
            if token in merged and merged[token] is not scope:
                logger.debug("registration for %s overridden by %r", token.__qualname__, scope)
            merged[token] = scope

        return Registry(merged)

    def __getitem__(self, token: type) -> ResolutionScope:
        return self._entries[token]

    def __iter__(self) -> Iterator[type]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        names = ", ".join(token.__qualname__ for token in self._entries)
        return f"Registry({names})"
