"""Custom exception hierarchy for the WiX fragment pipeline."""

from __future__ import annotations


class WixBuildError(RuntimeError):
    """Base exception for fragment generation failures."""


class MarkupError(WixBuildError):
    """Raised when a producer emits markup the stream writer cannot accept."""


class BuildStateError(WixBuildError):
    """Raised when a builder operation is invoked out of lifecycle order."""


class ConfigError(WixBuildError):
    """Raised when a build file cannot be read or validated."""


class ResourceMaterializationError(OSError, WixBuildError):
    """Raised when an additional resource cannot be saved into the output directory."""

    def __init__(self, target_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Failed to save resource '{target_name}'")
        self.target_name = target_name


def exception_messages(exc: BaseException) -> list[str]:
    """Return the collected message chain for an exception and its causes."""
    messages: list[str] = []
    visited: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in visited:
        visited.add(id(current))
        text = str(current).strip()
        if text:
            first_line = text.splitlines()[0].strip()
            if first_line:
                messages.append(first_line)
        current = current.__cause__ or current.__context__
    return messages


def exception_hint(exc: BaseException) -> str | None:
    """Return the most specific message available for an exception chain."""
    messages = exception_messages(exc)
    return messages[-1] if messages else None


__all__ = [
    "BuildStateError",
    "ConfigError",
    "MarkupError",
    "ResourceMaterializationError",
    "WixBuildError",
    "exception_hint",
    "exception_messages",
]
