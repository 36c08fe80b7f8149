import logging
import types
from typing import Annotated, Optional

import pytest

from litewire import (
    DecoratedCatalog,
    ResourceSetting,
    ScanError,
    StaticCatalog,
    Tag,
    TagName,
    TypeCatalog,
    TypeMetadata,
    UnresolvedAnnotationError,
    Wired,
    eager,
    managed,
    metadata_of,
    resource_bundle,
    singleton,
)


def test_decorators_stamp_type_tags():
    @managed("users")
    @singleton
    @eager
    class UserRepo: ...

    metadata = metadata_of(UserRepo)
    assert metadata.get(TagName.MANAGED_CLASS) == Tag(TagName.MANAGED_CLASS, "users")
    assert metadata.has(TagName.SINGLETON_SCOPE)
    assert metadata.has(TagName.EAGER)
    assert not metadata.has(TagName.RESOURCE_BUNDLE)


def test_bare_and_called_decorator_forms_are_equivalent():
    @managed
    class Bare: ...

    @managed()
    class Called: ...

    @resource_bundle
    class Bundle: ...

    assert metadata_of(Bare).type_tags == (Tag(TagName.MANAGED_CLASS),)
    assert metadata_of(Called).type_tags == (Tag(TagName.MANAGED_CLASS),)
    assert metadata_of(Bundle).type_tags == (Tag(TagName.RESOURCE_BUNDLE),)


def test_decorators_reject_non_classes():
    with pytest.raises(TypeError):
        singleton(lambda: None)


def test_type_tags_are_not_inherited():
    @managed
    @singleton
    class Base: ...

    class Child(Base): ...

    assert metadata_of(Child).type_tags == ()


def test_property_tags_come_from_annotated_markers():
    class Repo: ...

    class Service:
        repo: Annotated[Repo, Wired()]
        mailer: Annotated[object, Wired("smtp")]
        host: Annotated[str, ResourceSetting("db.host")]
        raw: Annotated[str, Tag(TagName.RESOURCE_SETTING, "db.user")]
        plain: int = 0
        other: Annotated[int, "unrelated"] = 0

    assert metadata_of(Service).property_tags == {
        "repo": (Tag(TagName.WIRED),),
        "mailer": (Tag(TagName.WIRED, "smtp"),),
        "host": (Tag(TagName.RESOURCE_SETTING, "db.host"),),
        "raw": (Tag(TagName.RESOURCE_SETTING, "db.user"),),
    }


def test_property_tags_include_base_class_properties_first():
    class Base:
        db: Annotated[object, Wired()]

    class Child(Base):
        cache: Annotated[object, Wired()]

    assert list(metadata_of(Child).property_tags) == ["db", "cache"]


def test_markers_nested_under_optional_are_ignored_with_a_warning(caplog):
    class Service:
        repo: Optional[Annotated[object, Wired()]] = None

    with caplog.at_level(logging.WARNING, logger="litewire._metadata"):
        assert metadata_of(Service).property_tags == {}
    assert "Service.repo" in caplog.text
    assert "ignored" in caplog.text


def test_unresolvable_annotation_raises_instead_of_dropping_tags():
    class Service:
        repo: Annotated["MissingRepo", Wired()]

    with pytest.raises(UnresolvedAnnotationError) as ctx:
        metadata_of(Service)
    assert ctx.value.type_ is Service
    assert isinstance(ctx.value.__cause__, NameError)
    assert isinstance(ctx.value, ScanError)


def test_decorated_catalog_add_works_as_decorator_and_keeps_order():
    catalog = DecoratedCatalog()

    @catalog.add
    @managed
    class First: ...

    @catalog.add
    class Second: ...

    catalog.add(First)

    assert list(catalog) == [First, Second]
    assert len(catalog) == 2
    assert First in catalog
    assert isinstance(catalog, TypeCatalog)


def test_decorated_catalog_rejects_non_classes():
    with pytest.raises(TypeError):
        DecoratedCatalog().add("First")


def test_decorated_catalog_harvests_classes_defined_in_a_module():
    module = types.ModuleType("fake_services")

    @managed
    class Local: ...

    class Imported: ...

    class Untagged: ...

    Local.__module__ = "fake_services"
    Untagged.__module__ = "fake_services"
    module.Local = Local
    module.Imported = Imported
    module.Untagged = Untagged
    module.value = 3

    catalog = DecoratedCatalog()
    catalog.add_module(module)

    assert list(catalog) == [Local]
    assert catalog.metadata(Local).has(TagName.MANAGED_CLASS)


def test_decorated_catalog_imports_modules_by_name():
    catalog = DecoratedCatalog()
    catalog.add_module("litewire._catalog")

    assert DecoratedCatalog not in catalog
    assert len(catalog) == 0


def test_static_catalog_returns_given_metadata_and_defaults_to_empty():
    class A: ...

    class B: ...

    metadata = TypeMetadata(type_tags=(Tag(TagName.MANAGED_CLASS),))
    catalog = StaticCatalog({A: metadata})
    catalog.add(B, TypeMetadata())

    assert list(catalog) == [A, B]
    assert catalog.metadata(A) is metadata
    assert catalog.metadata(int) == TypeMetadata()
    assert isinstance(catalog, TypeCatalog)
