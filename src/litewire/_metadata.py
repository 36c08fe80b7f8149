"""Declarative metadata: tags, their structured view, and the decorators that stamp them.

Type-level tags are stamped on a class by the decorators below. Property-level
tags are declared through ``typing.Annotated`` class annotations:

    @managed
    @singleton
    class UserService:
        repo: Annotated[UserRepo, Wired()]
        host: Annotated[str, ResourceSetting("db.host")]

        def setRepo(self, repo): ...
        def setHost(self, host): ...
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, get_args, get_origin, get_type_hints

from ._errors import UnresolvedAnnotationError


if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from typing import TypeVar

    C = TypeVar("C", bound=type)


logger = logging.getLogger(__name__)

# Attribute stamped on decorated classes. Read from the class' own __dict__ so
# subclasses of a managed class are not managed implicitly.
TAGS_ATTR = "_litewire_tags"


class TagName(str, Enum):
    MANAGED_CLASS = "managed-class"
    SINGLETON_SCOPE = "singleton-scope"
    EAGER = "eager"
    RESOURCE_BUNDLE = "resource-bundle"
    WIRED = "wired"
    RESOURCE_SETTING = "resource-setting"


@dataclass(frozen=True)
class Tag:
    name: TagName
    argument: str | None = None

    def __post_init__(self) -> None:
        # Hosts parsing tags elsewhere may pass the plain tag string.
        object.__setattr__(self, "name", TagName(self.name))


@dataclass(frozen=True)
class TypeMetadata:
    """Structured view of the tags declared on one type.

    Attributes:
        type_tags: Tags applied to the type itself.
        property_tags: Tags per property name, in property declaration order.
    """

    type_tags: tuple[Tag, ...] = ()
    property_tags: Mapping[str, tuple[Tag, ...]] = field(default_factory=dict)

    def get(self, name: TagName) -> Tag | None:
        for tag in self.type_tags:
            if tag.name is name:
                return tag
        return None

    def has(self, name: TagName) -> bool:
        return self.get(name) is not None

    def properties(self) -> Iterator[tuple[str, tuple[Tag, ...]]]:
        yield from self.property_tags.items()


@dataclass(frozen=True)
class Wired:
    """Property marker: inject the managed object named ``reference``.

    Without a reference the property's own name (first letter lower-cased) is used.
    """

    reference: str | None = None

    def to_tag(self) -> Tag:
        return Tag(TagName.WIRED, self.reference)


@dataclass(frozen=True)
class ResourceSetting:
    """Property marker: inject ``bundle.key`` from a resource bundle."""

    expression: str | None = None

    def to_tag(self) -> Tag:
        return Tag(TagName.RESOURCE_SETTING, self.expression)


def _stamp(cls: C, tag: Tag) -> C:
    if not inspect.isclass(cls):
        msg = f"@{tag.name.value} can only decorate classes, got {cls!r}"
        raise TypeError(msg)
    tags = cls.__dict__.get(TAGS_ATTR, ())
    setattr(cls, TAGS_ATTR, (*tags, tag))
    return cls


def _named_tag(name: TagName, argument: Any) -> Any:
    # Supports both the bare form (@managed) and the called form (@managed("ref")).
    if inspect.isclass(argument):
        return _stamp(argument, Tag(name))

    def decorator(cls: C) -> C:
        return _stamp(cls, Tag(name, argument))

    return decorator


def managed(reference: Any = None) -> Any:
    """Register the decorated class as a managed type, optionally under ``reference``."""
    return _named_tag(TagName.MANAGED_CLASS, reference)


def resource_bundle(reference: Any = None) -> Any:
    """Register the decorated class as a resource bundle, optionally under ``reference``."""
    return _named_tag(TagName.RESOURCE_BUNDLE, reference)


def singleton(cls: C) -> C:
    return _stamp(cls, Tag(TagName.SINGLETON_SCOPE))


shared = singleton
request_scoped = singleton


def eager(cls: C) -> C:
    return _stamp(cls, Tag(TagName.EAGER))


def type_tags_of(tp: type) -> tuple[Tag, ...]:
    return tuple(tp.__dict__.get(TAGS_ATTR, ()))


def property_tags_of(tp: type) -> dict[str, tuple[Tag, ...]]:
    """Collect property tags from ``Annotated`` class annotations, bases first.

    Raises UnresolvedAnnotationError when the annotations cannot be evaluated.
    """
    hints = _get_class_type_hints(tp)

    result: dict[str, tuple[Tag, ...]] = {}
    for name, hint in hints.items():
        if get_origin(hint) is not Annotated:
            if _has_nested_marker(hint):
                logger.warning(
                    "%s.%s: markers nested inside %r are ignored; use Annotated at the top level",
                    tp.__qualname__,
                    name,
                    hint,
                )
            continue
        tags = tuple(_as_tag(extra) for extra in get_args(hint)[1:] if _is_marker(extra))
        if tags:
            result[name] = tags
    return result


def metadata_of(tp: type) -> TypeMetadata:
    return TypeMetadata(type_tags=type_tags_of(tp), property_tags=property_tags_of(tp))


def _is_marker(extra: object) -> bool:
    return isinstance(extra, (Wired, ResourceSetting, Tag))


def _has_nested_marker(hint: object) -> bool:
    for arg in get_args(hint):
        if get_origin(arg) is Annotated and any(_is_marker(extra) for extra in get_args(arg)[1:]):
            return True
        if _has_nested_marker(arg):
            return True
    return False


def _as_tag(extra: Wired | ResourceSetting | Tag) -> Tag:
    if isinstance(extra, Tag):
        return extra
    return extra.to_tag()


def _get_class_type_hints(tp: type) -> dict[str, Any]:
    try:
        return get_type_hints(tp, include_extras=True)
    except NameError as exc:
        raise UnresolvedAnnotationError(tp, exc.name) from exc
    except TypeError as exc:
        raise UnresolvedAnnotationError(tp) from exc
