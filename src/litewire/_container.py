from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING, Any, Protocol, TypeVar, overload, runtime_checkable

from ._errors import CyclicDependencyError, MissingSetterError, NotFoundError
from ._registry import InjectionKind, InjectionPoint, ManagedType, Registry
from ._scanner import Scanner


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._catalog import TypeCatalog

    Path = tuple[str, ...]

T = TypeVar("T")

# Optional hook called once on every built instance, after injection.
POST_CONSTRUCT = "postConstruct"


@runtime_checkable
class ResourceBundle(Protocol):
    """Key/value store backing resource settings (credentials, hosts, ...)."""

    @staticmethod
    def get(key: str) -> Any: ...


class Container:
    """Metadata-driven DI container.

    - scans a type catalog into a registry on ``initialize()``
    - eagerly builds types tagged eager, caching eager singletons
    - ``resolve(reference)`` builds or reuses instances, injecting through setters
    - lifetimes: singleton / transient.
    """

    def __init__(self, catalog: TypeCatalog) -> None:
        self._catalog = catalog
        self._registry = Registry()
        self._lock = threading.RLock()
        # Held while any uncached singleton is built; re-entrant for nested singletons.
        self._build_lock = threading.RLock()
        self._initialized = False

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialize(self) -> None:
        """Build the registry and run the eager pass. Later calls do nothing."""
        with self._lock:
            if self._initialized:
                logger.debug("Container already initialized")
                return

            registry = Registry()
            Scanner(registry).scan(self._catalog)
            self._registry = registry

            for descriptor in registry.all_managed_types():
                if descriptor.eager:
                    logger.debug("Eagerly constructing %r", descriptor.reference)
                    self._provide(descriptor, ())

            self._initialized = True
            logger.debug("Container initialized with %d managed types", len(registry))

    @overload
    def resolve(self, reference: type[T]) -> T: ...

    @overload
    def resolve(self, reference: str) -> object: ...

    def resolve(self, reference: str | type) -> object:
        """Return the instance registered under ``reference``.

        Singletons are built once and cached; other types are built on every call.
        A class or class name is accepted too, at the cost of a registry scan.
        """
        return self._resolve(reference, ())

    def __contains__(self, reference: object) -> bool:
        if not isinstance(reference, (str, type)):
            return False
        return self._registry.lookup_managed_type(reference) is not None

    def _resolve(self, reference: str | type, path: Path) -> object:
        descriptor = self._registry.lookup_managed_type(reference)
        if descriptor is None:
            raise NotFoundError(reference)
        return self._provide(descriptor, path)

    def _provide(self, descriptor: ManagedType, path: Path) -> object:
        if descriptor.reference in path:
            raise CyclicDependencyError((*path, descriptor.reference))

        if not descriptor.singleton:
            return self._build(descriptor, path)

        instance = descriptor.cached_instance
        if instance is not None:
            return instance

        # Concurrent callers wait here and then get the instance built by the first.
        with self._build_lock:
            if descriptor.cached_instance is None:
                descriptor.cached_instance = self._build(descriptor, path)
                logger.debug("Cached singleton %r", descriptor.reference)
            return descriptor.cached_instance

    def _build(self, descriptor: ManagedType, path: Path) -> object:
        chain = (*path, descriptor.reference)
        instance = descriptor.type_()

        for point in descriptor.injection_points:
            setter = _find_setter(instance, descriptor, point)
            if point.kind is InjectionKind.OBJECT_REFERENCE:
                value = self._resolve(point.source_expression, chain)
            else:
                value = self._resource_value(point)
            setter(value)

        hook = getattr(instance, POST_CONSTRUCT, None)
        if callable(hook):
            hook()

        return instance

    def _resource_value(self, point: InjectionPoint) -> Any:
        bundle_reference, key = point.split_expression()
        bundle = self._registry.lookup_resource_bundle(bundle_reference)
        if bundle is None:
            raise NotFoundError(bundle_reference)
        return bundle.type_.get(key)  # type: ignore[attr-defined]


def _find_setter(instance: object, descriptor: ManagedType, point: InjectionPoint) -> Callable[[Any], object]:
    setter = getattr(instance, point.setter_name, None)
    if not callable(setter):
        raise MissingSetterError(descriptor.type_, point.target_property, point.setter_name)
    return setter
