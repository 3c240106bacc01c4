"""WiX toolset version helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import total_ordering
import logging
import re


logger = logging.getLogger(__name__)

_COMPONENT_PATTERN = re.compile(r"^\d+(?:\.\d+)*")


@total_ordering
@dataclass(frozen=True, slots=True)
class DottedVersion:
    """Version made of dot-separated numeric components, e.g. ``3.14.1.8722``.

    Trailing non-numeric text (``3.11.2-rc1``) is kept in :attr:`raw` but
    ignored for comparisons. Missing components compare as zero.
    """

    components: tuple[int, ...]
    raw: str

    @classmethod
    def parse(cls, value: str) -> DottedVersion:
        text = value.strip()
        match = _COMPONENT_PATTERN.match(text)
        if match is None:
            raise ValueError(f"Invalid version string: {value!r}")
        components = tuple(int(part) for part in match.group(0).split("."))
        return cls(components=components, raw=text)

    def _padded(self, width: int) -> tuple[int, ...]:
        return self.components + (0,) * (width - len(self.components))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DottedVersion):
            return NotImplemented
        width = max(len(self.components), len(other.components))
        return self._padded(width) == other._padded(width)

    def __lt__(self, other: DottedVersion) -> bool:
        if not isinstance(other, DottedVersion):
            return NotImplemented
        width = max(len(self.components), len(other.components))
        return self._padded(width) < other._padded(width)

    def __hash__(self) -> int:
        trimmed = list(self.components)
        while trimmed and trimmed[-1] == 0:
            trimmed.pop()
        return hash(tuple(trimmed))

    def __str__(self) -> str:
        return self.raw


WIX_36 = DottedVersion.parse("3.6")


def log_wix_features(version: DottedVersion | None) -> bool:
    """Log the optional toolset features enabled for ``version``.

    Returns whether WiX 3.6+ features are available.
    """
    if version is None:
        return False
    if version >= WIX_36:
        logger.info("WiX %s detected. Enabling WiX 3.6+ features.", version)
        return True
    return False


__all__ = ["WIX_36", "DottedVersion", "log_wix_features"]
