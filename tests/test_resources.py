from __future__ import annotations

from pathlib import Path

import pytest

from wixsmith.core.exceptions import ResourceMaterializationError, WixBuildError
from wixsmith.core.resources import OverridableResource, ResourceSet, ResourceSource


def test_default_content_is_used_without_override(tmp_path: Path) -> None:
    resource = OverridableResource.from_text("default", resource_dir=tmp_path / "missing")
    dest = tmp_path / "out" / "license.rtf"

    assert resource.save_to_file(dest) is ResourceSource.DEFAULT
    assert dest.read_text(encoding="utf-8") == "default"


def test_override_takes_precedence(tmp_path: Path) -> None:
    resource_dir = tmp_path / "resources"
    resource_dir.mkdir()
    (resource_dir / "license.rtf").write_text("custom", encoding="utf-8")
    resource = OverridableResource.from_text("default", resource_dir=resource_dir)
    dest = tmp_path / "out" / "license.rtf"

    assert resource.save_to_file(dest) is ResourceSource.RESOURCE_DIR
    assert dest.read_text(encoding="utf-8") == "custom"


def test_public_name_selects_override_file(tmp_path: Path) -> None:
    resource_dir = tmp_path / "resources"
    resource_dir.mkdir()
    (resource_dir / "my-banner.bmp").write_bytes(b"\x00banner")
    resource = OverridableResource.from_bytes(
        b"builtin", resource_dir=resource_dir, public_name="my-banner.bmp"
    )
    dest = tmp_path / "banner.bmp"

    assert resource.save_to_file(dest) is ResourceSource.RESOURCE_DIR
    assert dest.read_bytes() == b"\x00banner"


def test_source_order_can_exclude_default(tmp_path: Path) -> None:
    resource = OverridableResource.from_text("default", resource_dir=tmp_path)
    resource.set_source_order(ResourceSource.RESOURCE_DIR)
    assert resource.source_order == (ResourceSource.RESOURCE_DIR,)
    dest = tmp_path / "out" / "main.wxs"

    assert resource.save_to_file(dest) is None
    assert not dest.exists()


def test_resource_without_default_saves_nothing(tmp_path: Path) -> None:
    resource = OverridableResource()

    assert not resource.has_default
    assert resource.save_to_file(tmp_path / "x.txt") is None


def test_substitution_data_is_applied(tmp_path: Path) -> None:
    resource = OverridableResource.from_text("Hello ${NAME}, ${NAME}! ${OTHER}")
    resource.set_substitution_data({"NAME": "World"})
    dest = tmp_path / "greeting.txt"

    resource.save_to_file(dest)

    assert dest.read_text(encoding="utf-8") == "Hello World, World! ${OTHER}"


def test_from_file_reads_default(tmp_path: Path) -> None:
    source = tmp_path / "default.wxl"
    source.write_text("<WixLocalization/>", encoding="utf-8")
    resource = OverridableResource.from_file(source)

    dest = tmp_path / "out" / "en.wxl"
    assert resource.save_to_file(dest) is ResourceSource.DEFAULT
    assert dest.read_text(encoding="utf-8") == "<WixLocalization/>"


def test_materialize_all_writes_entries_in_order(tmp_path: Path) -> None:
    resources = ResourceSet()
    resources.add(OverridableResource.from_text("one"), "a.txt")
    resources.add(OverridableResource.from_text("two"), "b.txt")
    resources.add(OverridableResource.from_text("three"), "a.txt")
    resources.add(OverridableResource(), "skipped.txt")

    written = resources.materialize_all(tmp_path / "out")

    assert written == [tmp_path / "out" / name for name in ("a.txt", "b.txt", "a.txt")]
    assert (tmp_path / "out" / "a.txt").read_text(encoding="utf-8") == "three"
    assert not (tmp_path / "out" / "skipped.txt").exists()
    assert len(resources) == 4


class FailingResource:
    def save_to_file(self, dest: Path):
        raise PermissionError(f"denied: {dest}")


def test_materialize_all_aborts_on_first_failure(tmp_path: Path) -> None:
    resources = ResourceSet()
    resources.add(OverridableResource.from_text("ok"), "first.txt")
    resources.add(FailingResource(), "broken.ico")
    resources.add(OverridableResource.from_text("never"), "last.txt")

    with pytest.raises(ResourceMaterializationError) as excinfo:
        resources.materialize_all(tmp_path)

    error = excinfo.value
    assert error.target_name == "broken.ico"
    assert "broken.ico" in str(error)
    assert isinstance(error, OSError)
    assert isinstance(error, WixBuildError)
    assert isinstance(error.__cause__, PermissionError)
    assert (tmp_path / "first.txt").exists()
    assert not (tmp_path / "last.txt").exists()


def test_add_rejects_empty_target_name() -> None:
    with pytest.raises(ValueError):
        ResourceSet().add(OverridableResource.from_text("x"), "")


def test_substitution_on_binary_content_names_target(tmp_path: Path) -> None:
    resources = ResourceSet()
    resources.add(
        OverridableResource.from_bytes(b"\xff\xfe").set_substitution_data({"A": "b"}),
        "icon.ico",
    )

    with pytest.raises(ResourceMaterializationError) as excinfo:
        resources.materialize_all(tmp_path)

    assert excinfo.value.target_name == "icon.ico"
    assert isinstance(excinfo.value.__cause__, UnicodeDecodeError)
    assert not (tmp_path / "icon.ico").exists()


def test_binary_content_without_substitution_is_copied(tmp_path: Path) -> None:
    resources = ResourceSet()
    resources.add(OverridableResource.from_bytes(b"\xff\xfe"), "icon.ico")

    assert resources.materialize_all(tmp_path) == [tmp_path / "icon.ico"]
    assert (tmp_path / "icon.ico").read_bytes() == b"\xff\xfe"
