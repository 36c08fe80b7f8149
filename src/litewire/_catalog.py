"""Type catalogs: the host-side source of candidate types and their metadata."""

from __future__ import annotations

import importlib
import inspect
import logging
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ._metadata import TypeMetadata, metadata_of, type_tags_of


if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping
    from types import ModuleType


logger = logging.getLogger(__name__)


@runtime_checkable
class TypeCatalog(Protocol):
    """Enumerates candidate types and exposes the tags declared on each."""

    def __iter__(self) -> Iterator[type]: ...

    def metadata(self, tp: type) -> TypeMetadata: ...


class DecoratedCatalog:
    """Catalog of classes tagged with the ``litewire`` decorators and markers.

    Classes are added explicitly (``add`` also works as a class decorator) or
    harvested from modules with ``add_module``. Iteration follows insertion order.
    """

    def __init__(self, types: Iterable[type] = ()) -> None:
        self._types: dict[type, None] = {}
        for tp in types:
            self.add(tp)

    def add(self, tp: type) -> type:
        if not inspect.isclass(tp):
            msg = f"Only classes can be catalogued, got {tp!r}"
            raise TypeError(msg)
        self._types.setdefault(tp, None)
        return tp

    def add_module(self, module: ModuleType | str) -> None:
        """Add every tagged class defined in ``module`` (not merely imported into it)."""
        if isinstance(module, str):
            module = importlib.import_module(module)

        count = 0
        for obj in vars(module).values():
            if inspect.isclass(obj) and obj.__module__ == module.__name__ and type_tags_of(obj):
                self.add(obj)
                count += 1
        logger.debug("Catalogued %d classes from module %s", count, module.__name__)

    def metadata(self, tp: type) -> TypeMetadata:
        return metadata_of(tp)

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._types))

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, tp: object) -> bool:
        return tp in self._types


class StaticCatalog:
    """Catalog built from explicit ``(type, TypeMetadata)`` pairs.

    For hosts that parse metadata elsewhere and hand the container ready-made tags.
    """

    def __init__(self, entries: Mapping[type, TypeMetadata] | Iterable[tuple[type, TypeMetadata]] = ()) -> None:
        self._entries: dict[type, TypeMetadata] = dict(entries)

    def add(self, tp: type, metadata: TypeMetadata) -> None:
        self._entries[tp] = metadata

    def metadata(self, tp: type) -> TypeMetadata:
        return self._entries.get(tp, TypeMetadata())

    def __iter__(self) -> Iterator[type]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)
