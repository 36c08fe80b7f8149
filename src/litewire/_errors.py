from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Sequence


class ContainerError(RuntimeError):
    """Base class for every error raised by the container."""


class ScanError(ContainerError):
    """Metadata found while building the registry is unusable."""


class ResolutionError(ContainerError):
    """A reference could not be turned into a wired instance."""


class NotFoundError(ResolutionError, KeyError):
    """No managed type or resource bundle is registered under ``reference``."""

    def __init__(self, reference: object) -> None:
        self.reference = reference
        super().__init__(f"No registration found for reference: {reference!r}")

    # KeyError quotes its message; keep the plain one.
    def __str__(self) -> str:
        return str(self.args[0])


class MissingSetterError(ResolutionError):
    def __init__(self, type_: type, target_property: str, setter_name: str) -> None:
        self.type_ = type_
        self.target_property = target_property
        self.setter_name = setter_name
        super().__init__(
            f"Function {setter_name} doesn't exist on {type_.__name__} "
            f"(needed to inject property '{target_property}')"
        )


class InvalidExpressionError(ScanError, ResolutionError, ValueError):
    """A tag argument or resource expression is malformed.

    Raised while scanning when possible, otherwise when the offending
    injection point is built.
    """

    def __init__(self, expression: object, reason: str = "") -> None:
        self.expression = expression
        msg = f"Don't know how to interpret {expression!r}"
        if reason:
            msg = f"{msg}: {reason}"
        super().__init__(msg)


class CyclicDependencyError(ResolutionError):
    def __init__(self, path: Sequence[str]) -> None:
        self.path = tuple(path)
        super().__init__(f"Cyclic dependency detected: {' -> '.join(self.path)}")


class DuplicateReferenceError(ScanError):
    def __init__(self, reference: str, namespace: str, existing: type, duplicate: type) -> None:
        self.reference = reference
        self.namespace = namespace
        super().__init__(
            f"{namespace} reference {reference!r} is already registered by "
            f"{existing.__qualname__}; {duplicate.__qualname__} cannot reuse it."
        )


class InvalidBundleError(ScanError, TypeError):
    def __init__(self, type_: type) -> None:
        self.type_ = type_
        super().__init__(f"Resource bundle {type_.__qualname__} must expose a callable static 'get(key)'")


class UnresolvedAnnotationError(ScanError):
    """A class' annotations cannot be evaluated, so its property tags are unknown."""

    def __init__(self, type_: type, name: str | None = None) -> None:
        self.type_ = type_
        self.name = name
        detail = f"name {name!r} is not defined" if name else "annotations cannot be evaluated"
        super().__init__(f"Cannot read property tags of {type_.__qualname__}: {detail}")
