from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, TypeVar

from ._errors import DuplicateReferenceError, InvalidExpressionError


if TYPE_CHECKING:
    from collections.abc import Iterable


logger = logging.getLogger(__name__)

_REFERENCE = re.compile(r"\w+")
_RESOURCE_EXPRESSION = re.compile(r"(\w+)\.(\w+)")


def lcfirst(name: str) -> str:
    return name[:1].lower() + name[1:]


def default_reference(tp: type) -> str:
    """Reference used when a tag names none: the class name, first letter lower-cased."""
    return lcfirst(tp.__name__)


def setter_name(target_property: str) -> str:
    """``foo`` -> ``setFoo``. Managed types written elsewhere rely on this exact form."""
    return "set" + target_property[:1].upper() + target_property[1:]


def is_reference(value: object) -> bool:
    return isinstance(value, str) and _REFERENCE.fullmatch(value) is not None


class InjectionKind(Enum):
    OBJECT_REFERENCE = "object"
    RESOURCE_VALUE = "resource"


@dataclass(frozen=True)
class InjectionPoint:
    """One dependency slot of a managed type.

    Attributes:
        target_property: Property receiving the value through its setter.
        kind: Whether the value is another managed object or a bundle value.
        source_expression: A managed reference, or ``bundle.key`` for resource values.
    """

    target_property: str
    kind: InjectionKind
    source_expression: str

    @property
    def setter_name(self) -> str:
        return setter_name(self.target_property)

    def split_expression(self) -> tuple[str, str]:
        """Split a resource expression into ``(bundle_reference, property_key)``."""
        match = None
        if isinstance(self.source_expression, str):
            match = _RESOURCE_EXPRESSION.fullmatch(self.source_expression)
        if match is None:
            raise InvalidExpressionError(self.source_expression, "expected 'bundle.key'")
        return match.group(1), match.group(2)


@dataclass(eq=False)
class ManagedType:
    reference: str
    type_: type
    singleton: bool = False
    eager: bool = False
    injection_points: tuple[InjectionPoint, ...] = ()
    cached_instance: object | None = None  # singleton only; written once by the container


@dataclass(frozen=True)
class ResourceBundleInfo:
    reference: str
    type_: type


class Registry:
    """Managed types and resource bundles, keyed by reference.

    The two collections are separate namespaces. Entries are added only while
    scanning; afterwards the registry is read-only apart from singleton caches.
    """

    def __init__(self) -> None:
        self._managed: dict[str, ManagedType] = {}
        self._bundles: dict[str, ResourceBundleInfo] = {}

    def register_managed_type(self, descriptor: ManagedType) -> None:
        existing = self._managed.get(descriptor.reference)
        if existing is not None:
            raise DuplicateReferenceError(descriptor.reference, "Managed type", existing.type_, descriptor.type_)
        self._managed[descriptor.reference] = descriptor
        logger.debug(
            "Registered managed type %r -> %s (singleton=%s, eager=%s, %d injection points)",
            descriptor.reference,
            descriptor.type_.__qualname__,
            descriptor.singleton,
            descriptor.eager,
            len(descriptor.injection_points),
        )

    def register_resource_bundle(self, descriptor: ResourceBundleInfo) -> None:
        existing = self._bundles.get(descriptor.reference)
        if existing is not None:
            raise DuplicateReferenceError(descriptor.reference, "Resource bundle", existing.type_, descriptor.type_)
        self._bundles[descriptor.reference] = descriptor
        logger.debug("Registered resource bundle %r -> %s", descriptor.reference, descriptor.type_.__qualname__)

    def find_managed_type(self, reference: str) -> ManagedType | None:
        return self._managed.get(reference)

    def find_resource_bundle(self, reference: str) -> ResourceBundleInfo | None:
        return self._bundles.get(reference)

    def lookup_managed_type(self, name: str | type) -> ManagedType | None:
        """Find by reference, falling back to a scan over the registered classes.

        The fallback matches a class object or a class name; pass the canonical
        reference to avoid it.
        """
        if isinstance(name, str):
            descriptor = self._managed.get(name)
            if descriptor is not None:
                return descriptor
        return _scan_by_type(self._managed.values(), name)

    def lookup_resource_bundle(self, name: str | type) -> ResourceBundleInfo | None:
        if isinstance(name, str):
            descriptor = self._bundles.get(name)
            if descriptor is not None:
                return descriptor
        return _scan_by_type(self._bundles.values(), name)

    def all_managed_types(self) -> list[ManagedType]:
        return list(self._managed.values())

    def all_resource_bundles(self) -> list[ResourceBundleInfo]:
        return list(self._bundles.values())

    def references(self) -> list[str]:
        return list(self._managed)

    def __contains__(self, reference: object) -> bool:
        return reference in self._managed

    def __len__(self) -> int:
        return len(self._managed)


D = TypeVar("D", ManagedType, ResourceBundleInfo)


def _scan_by_type(descriptors: Iterable[D], name: str | type) -> D | None:
    for descriptor in descriptors:
        if descriptor.type_ is name or descriptor.type_.__name__ == name:
            logger.debug("Resolved %r to reference %r by type scan", name, descriptor.reference)
            return descriptor
    return None
