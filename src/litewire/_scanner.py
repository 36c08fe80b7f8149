from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._errors import InvalidBundleError, InvalidExpressionError
from ._metadata import Tag, TagName, TypeMetadata
from ._registry import (
    InjectionKind,
    InjectionPoint,
    ManagedType,
    Registry,
    ResourceBundleInfo,
    default_reference,
    is_reference,
    lcfirst,
)


if TYPE_CHECKING:
    from ._catalog import TypeCatalog


logger = logging.getLogger(__name__)


class Scanner:
    """Classifies catalogued types and fills a registry with their descriptors.

    Malformed metadata fails here rather than when the type is first built.
    """

    def __init__(self, registry: Registry) -> None:
        self._registry = registry

    def scan(self, catalog: TypeCatalog) -> int:
        """Scan every type of ``catalog``; return how many descriptors were registered."""
        registered = 0
        for tp in catalog:
            if self.scan_type(tp, catalog.metadata(tp)) is not None:
                registered += 1
        logger.debug("Scan complete: %d descriptors registered", registered)
        return registered

    def scan_type(self, tp: type, metadata: TypeMetadata) -> ManagedType | ResourceBundleInfo | None:
        managed_tag = metadata.get(TagName.MANAGED_CLASS)
        if managed_tag is not None:
            if metadata.has(TagName.RESOURCE_BUNDLE):
                logger.warning("%s is both managed and a resource bundle; the bundle tag is ignored", tp.__qualname__)

            descriptor = ManagedType(
                reference=self._reference(tp, managed_tag),
                type_=tp,
                singleton=metadata.has(TagName.SINGLETON_SCOPE),
                eager=metadata.has(TagName.EAGER),
                injection_points=self._injection_points(tp, metadata),
            )
            self._registry.register_managed_type(descriptor)
            return descriptor

        bundle_tag = metadata.get(TagName.RESOURCE_BUNDLE)
        if bundle_tag is not None:
            if not callable(getattr(tp, "get", None)):
                raise InvalidBundleError(tp)
            bundle = ResourceBundleInfo(reference=self._reference(tp, bundle_tag), type_=tp)
            self._registry.register_resource_bundle(bundle)
            return bundle

        return None

    def _reference(self, tp: type, tag: Tag) -> str:
        if tag.argument is None:
            return default_reference(tp)
        if not is_reference(tag.argument):
            raise InvalidExpressionError(tag.argument, f"invalid {tag.name.value} reference on {tp.__qualname__}")
        return tag.argument

    def _injection_points(self, tp: type, metadata: TypeMetadata) -> tuple[InjectionPoint, ...]:
        points = []
        for name, tags in metadata.properties():
            point = self._injection_point(tp, name, tags)
            if point is not None:
                points.append(point)
        return tuple(points)

    def _injection_point(self, tp: type, name: str, tags: tuple[Tag, ...]) -> InjectionPoint | None:
        wired = _first(tags, TagName.WIRED)
        setting = _first(tags, TagName.RESOURCE_SETTING)

        if wired is not None:
            if setting is not None:
                logger.warning(
                    "%s.%s is both wired and a resource setting; the resource setting is ignored",
                    tp.__qualname__,
                    name,
                )
            expression = lcfirst(name) if wired.argument is None else wired.argument
            if not is_reference(expression):
                raise InvalidExpressionError(expression, f"invalid wired reference on {tp.__qualname__}.{name}")
            return InjectionPoint(name, InjectionKind.OBJECT_REFERENCE, expression)

        if setting is not None:
            if setting.argument is None:
                raise InvalidExpressionError(
                    setting.argument, f"resource setting on {tp.__qualname__}.{name} needs 'bundle.key'"
                )
            point = InjectionPoint(name, InjectionKind.RESOURCE_VALUE, setting.argument)
            point.split_expression()
            return point

        return None


def _first(tags: tuple[Tag, ...], name: TagName) -> Tag | None:
    return next((tag for tag in tags if tag.name is name), None)
