"""Configuration models for TOML build files.

BuildConfig

`output_dir` (`Path`)
: Directory receiving the generated fragment and the staged resources.

`output_file` (`str`)
: File name of the generated fragment. A file with the same name in
  `resource_dir` replaces the generated fragment entirely.

`resource_dir` (`Path | None`)
: Directory searched for override files before built-in defaults are used.

`wix_version` (`str | None`)
: Dotted WiX toolset version, used to report optional toolset features.

`defines` (`list[str]`)
: Preprocessor flag variables set to `yes`.

`variables` (`dict[str, str]`)
: Preprocessor variables passed to the compiler with `-d`.

`resources` (`list[ResourceConfig]`)
: Additional files staged next to the fragment.

`fragments` (`list[FragmentConfig]`)
: Fragment contents, one `<Fragment>` element per entry in declaration order.

Relative paths are resolved against the directory holding the build file.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any


try:  # Python >=3.11
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # Python 3.10
    import tomli as tomllib

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from .exceptions import ConfigError
from .fragments import ElementProducer, ElementSpec, OutputTarget, WixFragmentBuilder
from .resources import OverridableResource


class ElementConfig(BaseModel):
    """One element of a declarative fragment."""

    model_config = ConfigDict(extra="forbid")

    name: str
    attributes: dict[str, str] = Field(default_factory=dict)
    text: str | None = None
    children: list[ElementConfig] = Field(default_factory=list)

    def to_spec(self) -> ElementSpec:
        return ElementSpec(
            name=self.name,
            attributes=dict(self.attributes),
            text=self.text,
            children=[child.to_spec() for child in self.children],
        )


class FragmentConfig(BaseModel):
    """Content of a single ``<Fragment>`` element."""

    model_config = ConfigDict(extra="forbid")

    elements: list[ElementConfig] = Field(default_factory=list)


class ResourceConfig(BaseModel):
    """Additional file staged into the output directory."""

    model_config = ConfigDict(extra="forbid")

    name: str = Field(description="Target file name inside the output directory")
    source: Path | None = Field(default=None, description="Default content file")
    text: str | None = Field(default=None, description="Inline default content")
    public_name: str | None = Field(
        default=None, description="Override file name looked up in the resource directory"
    )
    substitutions: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="after")
    def check_single_default(self) -> ResourceConfig:
        """Reject resources declaring both a source file and inline text."""
        if self.source is not None and self.text is not None:
            raise ValueError(f"Resource '{self.name}' cannot define both 'source' and 'text'.")
        return self

    def to_resource(self, resource_dir: Path | None) -> OverridableResource:
        kwargs: dict[str, Any] = {
            "resource_dir": resource_dir,
            "public_name": self.public_name,
            "category": "resource",
        }
        if self.source is not None:
            resource = OverridableResource.from_file(self.source, **kwargs)
        elif self.text is not None:
            resource = OverridableResource.from_text(self.text, default_name=self.name, **kwargs)
        else:
            resource = OverridableResource(**kwargs)
        return resource.set_substitution_data(self.substitutions)


class BuildConfig(BaseModel):
    """Top-level build file model."""

    model_config = ConfigDict(extra="forbid")

    output_dir: Path = Path("build")
    output_file: str = "main.wxs"
    resource_dir: Path | None = None
    wix_version: str | None = None
    defines: list[str] = Field(default_factory=list)
    variables: dict[str, str] = Field(default_factory=dict)
    resources: list[ResourceConfig] = Field(default_factory=list)
    fragments: list[FragmentConfig] = Field(default_factory=list)

    @field_validator("output_file")
    @classmethod
    def check_output_file(cls, value: str) -> str:
        if not value or Path(value).name != value:
            raise ValueError("output_file must be a bare file name")
        return value

    def resolve_paths(self, base_dir: Path) -> BuildConfig:
        """Return a copy whose relative paths are anchored at ``base_dir``."""

        def _anchor(path: Path | None) -> Path | None:
            if path is None or path.is_absolute():
                return path
            return base_dir / path

        resources = [
            resource.model_copy(update={"source": _anchor(resource.source)})
            for resource in self.resources
        ]
        return self.model_copy(
            update={
                "output_dir": _anchor(self.output_dir),
                "resource_dir": _anchor(self.resource_dir),
                "resources": resources,
            }
        )

    def output_target(self) -> OutputTarget:
        return OutputTarget(self.output_dir, self.output_file)

    def create_builder(self, **kwargs: Any) -> WixFragmentBuilder:
        """Return a configured builder reflecting this build file."""
        builder = WixFragmentBuilder(
            producers=[
                ElementProducer(element.to_spec() for element in fragment.elements)
                for fragment in self.fragments
            ],
            wix_version=self.wix_version,
            **kwargs,
        )
        builder.configure(self.output_target(), resource_dir=self.resource_dir)
        for name in self.defines:
            builder.define_variable(name)
        for name, value in self.variables.items():
            builder.set_variable(name, value)
        for resource in self.resources:
            builder.add_resource(resource.to_resource(self.resource_dir), resource.name)
        return builder


def load_build_config(path: Path) -> BuildConfig:
    """Read and validate a TOML build file."""
    path = Path(path)
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigError(f"Failed to read build file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ConfigError(f"Invalid build file {path}: not valid UTF-8 ({exc})") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid build file {path}: {exc}") from exc

    try:
        config = BuildConfig.model_validate(payload)
    except ValidationError as exc:
        raise ConfigError(f"Invalid build file {path}: {exc}") from exc
    return config.resolve_paths(path.parent.resolve())


__all__ = [
    "BuildConfig",
    "ElementConfig",
    "FragmentConfig",
    "ResourceConfig",
    "load_build_config",
]
