"""Metadata-driven dependency injection library.

Classes declare how they are managed with decorators and ``Annotated``
property markers; a ``Container`` scans a catalog of such classes, builds a
registry of descriptors, and resolves symbolic references into fully wired
instances, injecting dependencies through ``setXxx`` setters.

Exports:
- `Container`: scans a catalog on ``initialize()`` and serves ``resolve(reference)``.
- `DecoratedCatalog` / `StaticCatalog`: sources of candidate types and their tags.
- `managed`, `singleton`, `eager`, `resource_bundle`: type-level decorators.
- `Wired`, `ResourceSetting`: property markers used inside ``typing.Annotated``.
- The error taxonomy rooted at `ContainerError`.
"""

from ._catalog import DecoratedCatalog, StaticCatalog, TypeCatalog
from ._container import POST_CONSTRUCT, Container, ResourceBundle
from ._errors import (
    ContainerError,
    CyclicDependencyError,
    DuplicateReferenceError,
    InvalidBundleError,
    InvalidExpressionError,
    MissingSetterError,
    NotFoundError,
    ResolutionError,
    ScanError,
    UnresolvedAnnotationError,
)
from ._metadata import (
    ResourceSetting,
    Tag,
    TagName,
    TypeMetadata,
    Wired,
    eager,
    managed,
    metadata_of,
    request_scoped,
    resource_bundle,
    shared,
    singleton,
)
from ._registry import InjectionKind, InjectionPoint, ManagedType, Registry, ResourceBundleInfo, setter_name
from ._scanner import Scanner


__all__ = [
    "POST_CONSTRUCT",
    "Container",
    "ContainerError",
    "CyclicDependencyError",
    "DecoratedCatalog",
    "DuplicateReferenceError",
    "InjectionKind",
    "InjectionPoint",
    "InvalidBundleError",
    "InvalidExpressionError",
    "ManagedType",
    "MissingSetterError",
    "NotFoundError",
    "Registry",
    "ResolutionError",
    "ResourceBundle",
    "ResourceBundleInfo",
    "ResourceSetting",
    "ScanError",
    "Scanner",
    "StaticCatalog",
    "Tag",
    "TagName",
    "TypeCatalog",
    "TypeMetadata",
    "UnresolvedAnnotationError",
    "Wired",
    "eager",
    "managed",
    "metadata_of",
    "request_scoped",
    "resource_bundle",
    "setter_name",
    "shared",
    "singleton",
]
