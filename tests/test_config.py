from __future__ import annotations

from pathlib import Path
from xml.etree import ElementTree

import pytest

from wixsmith.core.config import BuildConfig, load_build_config
from wixsmith.core.exceptions import ConfigError
from wixsmith.core.fragments import WIX_NAMESPACE, FragmentOrigin


WI = f"{{{WIX_NAMESPACE}}}"

BUILD_FILE = """\
output_dir = "build"
output_file = "product.wxs"
resource_dir = "resources"
wix_version = "3.14"
defines = ["JpIsSystemWide"]

[variables]
ProductName = "Demo $ Co"

[[resources]]
name = "license.rtf"
text = "License for ${PRODUCT}"
substitutions = { PRODUCT = "Demo" }

[[fragments]]
[[fragments.elements]]
name = "Property"
attributes = { Id = "Cost", Value = "$5" }

[[fragments]]
[[fragments.elements]]
name = "ComponentGroup"
attributes = { Id = "Files" }

[[fragments.elements.children]]
name = "Component"
attributes = { Id = "Main", Directory = "$(var.InstallDir)" }
"""


def _write_build_file(tmp_path: Path, content: str = BUILD_FILE) -> Path:
    path = tmp_path / "wixsmith.toml"
    path.write_text(content, encoding="utf-8")
    return path


def test_load_build_config_resolves_relative_paths(tmp_path: Path) -> None:
    config = load_build_config(_write_build_file(tmp_path))

    assert config.output_dir == tmp_path.resolve() / "build"
    assert config.resource_dir == tmp_path.resolve() / "resources"
    assert config.output_file == "product.wxs"
    assert config.defines == ["JpIsSystemWide"]
    assert len(config.fragments) == 2


def test_config_builder_generates_fragment(tmp_path: Path) -> None:
    config = load_build_config(_write_build_file(tmp_path))
    builder = config.create_builder()

    result = builder.build()

    assert result.origin is FragmentOrigin.GENERATED
    root = ElementTree.parse(result.fragment_path).getroot()
    first, second = list(root)
    assert first[0].get("Value") == "$$5"
    component = second.find(f"{WI}ComponentGroup/{WI}Component")
    assert component is not None
    assert component.get("Directory") == "$(var.InstallDir)"

    license_path = tmp_path.resolve() / "build" / "license.rtf"
    assert result.resources == [license_path]
    assert license_path.read_text(encoding="utf-8") == "License for Demo"
    assert dict(builder.variable_values()) == {
        "JpIsSystemWide": "yes",
        "ProductName": "Demo $ Co",
    }


def test_resource_source_file_is_used_as_default(tmp_path: Path) -> None:
    (tmp_path / "defaults").mkdir()
    (tmp_path / "defaults" / "banner.txt").write_text("banner", encoding="utf-8")
    path = _write_build_file(
        tmp_path,
        'output_dir = "out"\n[[resources]]\nname = "banner.txt"\nsource = "defaults/banner.txt"\n',
    )

    config = load_build_config(path)
    result = config.create_builder().build()

    assert (tmp_path / "out" / "banner.txt").read_text(encoding="utf-8") == "banner"
    assert result.resources == [tmp_path.resolve() / "out" / "banner.txt"]


def test_empty_config_has_no_variables(tmp_path: Path) -> None:
    config = load_build_config(_write_build_file(tmp_path, ""))

    builder = config.create_builder()

    assert config.output_file == "main.wxs"
    assert builder.variable_values() is None


def test_unknown_keys_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid build file"):
        load_build_config(_write_build_file(tmp_path, 'unknown = "x"\n'))


def test_invalid_toml_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Invalid build file"):
        load_build_config(_write_build_file(tmp_path, "output_dir = \n"))


def test_missing_build_file_is_reported(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="Failed to read"):
        load_build_config(tmp_path / "missing.toml")


def test_output_file_must_be_bare_name() -> None:
    with pytest.raises(ValueError):
        BuildConfig(output_file="nested/main.wxs")


def test_resource_cannot_declare_two_defaults() -> None:
    with pytest.raises(ValueError, match="both"):
        BuildConfig.model_validate(
            {"resources": [{"name": "a.txt", "source": "a.txt", "text": "inline"}]}
        )


def test_non_utf8_build_file_is_reported(tmp_path: Path) -> None:
    path = tmp_path / "wixsmith.toml"
    path.write_bytes(b'output_file = "\xff.wxs"\n')

    with pytest.raises(ConfigError, match="not valid UTF-8"):
        load_build_config(path)
