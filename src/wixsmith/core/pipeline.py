"""Compiler invocation plan for generated WiX sources.

The pipeline only records sources and renders ``candle`` argument vectors;
running the toolset is left to the caller.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType


DEFAULT_EXTENSIONS = ("WixUtilExtension",)


@dataclass(frozen=True, slots=True)
class WixSource:
    """A source file and the preprocessor variables it is compiled with."""

    path: Path
    variables: Mapping[str, str] | None = None

    def object_name(self) -> str:
        return Path(self.path).with_suffix(".wixobj").name


class WixPipeline:
    """Collect WiX sources and build the compiler command lines for them."""

    def __init__(
        self,
        *,
        candle: str = "candle.exe",
        arch: str = "x64",
        extensions: tuple[str, ...] = DEFAULT_EXTENSIONS,
    ) -> None:
        self.candle = candle
        self.arch = arch
        self.extensions = extensions
        self._sources: list[WixSource] = []

    def add_source(self, path: Path, variables: Mapping[str, str] | None) -> WixPipeline:
        """Register ``path`` with its variable snapshot (``None`` when absent)."""
        snapshot = MappingProxyType(dict(variables)) if variables is not None else None
        self._sources.append(WixSource(Path(path), snapshot))
        return self

    @property
    def sources(self) -> tuple[WixSource, ...]:
        return tuple(self._sources)

    def candle_arguments(self, output_dir: Path) -> Iterator[list[str]]:
        """Yield one ``candle`` argument vector per registered source."""
        for source in self._sources:
            command = [self.candle, "-nologo", str(source.path)]
            for extension in self.extensions:
                command.extend(["-ext", extension])
            command.extend(["-arch", self.arch])
            command.extend(["-out", str(Path(output_dir) / source.object_name())])
            if source.variables is not None:
                command.extend(f"-d{name}={value}" for name, value in source.variables.items())
            yield command


__all__ = ["DEFAULT_EXTENSIONS", "WixPipeline", "WixSource"]
