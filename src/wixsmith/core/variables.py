"""WiX preprocessor variable table."""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType


TRUTHY_VALUE = "yes"


class WixVariables:
    """Ordered mapping of preprocessor variables handed to the compiler.

    The backing dictionary is only created on the first write so callers can
    tell "no variables" (``values()`` is ``None``) from an explicit table.
    """

    __slots__ = ("_values",)

    def __init__(self) -> None:
        self._values: dict[str, str] | None = None

    def define(self, name: str) -> None:
        """Set a flag variable to the conventional truthy value."""
        self.set(name, TRUTHY_VALUE)

    def set(self, name: str, value: str) -> None:
        """Set or overwrite a variable."""
        if not isinstance(name, str) or not name:
            raise ValueError("Variable names must be non-empty strings.")
        if not isinstance(value, str):
            raise TypeError(f"Value of variable '{name}' must be a string, got {type(value).__name__}.")
        if self._values is None:
            self._values = {}
        self._values[name] = value

    def values(self) -> Mapping[str, str] | None:
        """Return a read-only snapshot, or ``None`` when nothing was ever set."""
        if self._values is None:
            return None
        return MappingProxyType(dict(self._values))

    def __contains__(self, name: object) -> bool:
        return self._values is not None and name in self._values

    def __len__(self) -> int:
        return len(self._values) if self._values is not None else 0

    def __bool__(self) -> bool:
        return self._values is not None

    def __repr__(self) -> str:
        return f"WixVariables({self._values!r})"


__all__ = ["TRUTHY_VALUE", "WixVariables"]
