"""Overridable file resources staged next to the generated fragment.

A resource is resolved from an optional resource directory first (the user
override) and falls back to a built-in default. :class:`ResourceSet` gathers
the resources a builder needs and writes them into the output directory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from .exceptions import ResourceMaterializationError


logger = logging.getLogger(__name__)


class ResourceSource(str, Enum):
    """Origins a resource may be resolved from."""

    RESOURCE_DIR = "resource-dir"
    DEFAULT = "default"


@runtime_checkable
class SaveableResource(Protocol):
    """Resource able to materialize itself at a destination path."""

    def save_to_file(self, dest: Path) -> Any | None: ...


class OverridableResource:
    """File content resolved from an override directory or a built-in default."""

    def __init__(
        self,
        default_loader: Callable[[], bytes] | None = None,
        *,
        default_name: str | None = None,
        resource_dir: Path | str | None = None,
        public_name: str | None = None,
        category: str | None = None,
    ) -> None:
        self._default_loader = default_loader
        self._default_name = default_name
        self._resource_dir = Path(resource_dir) if resource_dir is not None else None
        self._public_name = public_name
        self._category = category
        self._source_order: tuple[ResourceSource, ...] = (
            ResourceSource.RESOURCE_DIR,
            ResourceSource.DEFAULT,
        )
        self._substitutions: dict[str, str] = {}

    @classmethod
    def from_text(cls, text: str, **kwargs: Any) -> OverridableResource:
        """Create a resource whose default content is ``text``."""
        payload = text.encode("utf-8")
        return cls(lambda: payload, **kwargs)

    @classmethod
    def from_bytes(cls, payload: bytes, **kwargs: Any) -> OverridableResource:
        """Create a resource whose default content is ``payload``."""
        return cls(lambda: payload, **kwargs)

    @classmethod
    def from_file(cls, path: Path | str, **kwargs: Any) -> OverridableResource:
        """Create a resource whose default content is read from ``path``."""
        source = Path(path)
        kwargs.setdefault("default_name", source.name)
        return cls(source.read_bytes, **kwargs)

    @property
    def resource_dir(self) -> Path | None:
        return self._resource_dir

    @property
    def public_name(self) -> str | None:
        return self._public_name

    @property
    def source_order(self) -> tuple[ResourceSource, ...]:
        return self._source_order

    @property
    def has_default(self) -> bool:
        return self._default_loader is not None

    def set_public_name(self, name: str | None) -> OverridableResource:
        self._public_name = name
        return self

    def set_source_order(self, *sources: ResourceSource) -> OverridableResource:
        """Restrict and reorder the sources consulted by :meth:`save_to_file`."""
        self._source_order = tuple(ResourceSource(source) for source in sources)
        return self

    def set_substitution_data(self, data: Mapping[str, str] | None) -> OverridableResource:
        """Replace ``${KEY}`` tokens in the saved content with the given values."""
        self._substitutions = dict(data or {})
        return self

    def save_to_file(self, dest: Path) -> ResourceSource | None:
        """Write the first available source to ``dest``.

        Returns the source that supplied the content, or ``None`` when none of
        the configured sources is available. I/O failures propagate.
        """
        dest = Path(dest)
        for source in self._source_order:
            if source is ResourceSource.RESOURCE_DIR:
                override = self._find_override(dest)
                if override is None:
                    continue
                logger.info(
                    "Using custom %s [%s]", self._category or "resource", override
                )
                self._write(dest, override.read_bytes())
                return source
            if source is ResourceSource.DEFAULT and self._default_loader is not None:
                logger.info(
                    "Using default %s [%s]",
                    self._category or "resource",
                    self._default_name or dest.name,
                )
                self._write(dest, self._default_loader())
                return source
        return None

    def _find_override(self, dest: Path) -> Path | None:
        if self._resource_dir is None:
            return None
        candidate = self._resource_dir / (self._public_name or dest.name)
        if candidate.is_file():
            return candidate
        return None

    def _write(self, dest: Path, payload: bytes) -> None:
        if self._substitutions:
            text = payload.decode("utf-8")
            for key, value in self._substitutions.items():
                text = text.replace(f"${{{key}}}", value)
            payload = text.encode("utf-8")
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(payload)


@dataclass(frozen=True, slots=True)
class ResourceEntry:
    """A resource paired with the file name it is saved under."""

    resource: SaveableResource
    target_name: str


class ResourceSet:
    """Ordered collection of resources materialized into an output directory."""

    def __init__(self, entries: Sequence[ResourceEntry] = ()) -> None:
        self._entries: list[ResourceEntry] = list(entries)

    def add(self, resource: SaveableResource, target_name: str) -> None:
        if not target_name:
            raise ValueError("Resources require a non-empty target file name.")
        self._entries.append(ResourceEntry(resource, target_name))

    def materialize_all(self, output_dir: Path) -> list[Path]:
        """Save every entry under ``output_dir``; the first failure aborts the pass."""
        output_dir = Path(output_dir)
        written: list[Path] = []
        for entry in self._entries:
            dest = output_dir / entry.target_name
            try:
                dest.parent.mkdir(parents=True, exist_ok=True)
                result = entry.resource.save_to_file(dest)
            except (OSError, UnicodeDecodeError) as exc:
                raise ResourceMaterializationError(
                    entry.target_name,
                    f"Failed to save resource '{entry.target_name}' to {dest}: {exc}",
                ) from exc
            if result is not None:
                written.append(dest)
        return written

    def __iter__(self) -> Iterator[ResourceEntry]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)


__all__ = [
    "OverridableResource",
    "ResourceEntry",
    "ResourceSet",
    "ResourceSource",
    "SaveableResource",
]
