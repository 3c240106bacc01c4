"""Protect literal ``$`` characters from the WiX preprocessor.

The WiX compiler substitutes ``$(var.Name)`` style references before it parses
the source. Any other ``$`` must be doubled to reach the compiled installer
verbatim. Escaping is scoped to a single string: a reference split across two
write calls is not recognised and will be mangled.
"""

from __future__ import annotations

from collections.abc import Sequence
import re

from .markup import MarkupSink


# Match '$', but not the '$' opening a reference such as $(var.foo).
DOLLAR_PATTERN = re.compile(r"\$(?!\([^)]*\))")


def escape_preprocessor(text: str) -> str:
    """Double every ``$`` that does not start a ``$(...)`` reference."""
    if not text or "$" not in text:
        return text
    return DOLLAR_PATTERN.sub("$$", text)


class PreprocessorEscapingWriter(MarkupSink):
    """Markup sink decorator escaping text and attribute values.

    Structural calls (elements, namespaces, comments, processing instructions)
    are forwarded verbatim; only character data and attribute values are
    rewritten with :func:`escape_preprocessor`.
    """

    def __init__(self, target: MarkupSink) -> None:
        self._target = target

    @property
    def target(self) -> MarkupSink:
        """Return the wrapped sink."""
        return self._target

    def write_start_document(self, version: str = "1.0", encoding: str = "utf-8") -> None:
        self._target.write_start_document(version, encoding)

    def write_end_document(self) -> None:
        self._target.write_end_document()

    def write_start_element(self, name: str) -> None:
        self._target.write_start_element(name)

    def write_empty_element(self, name: str) -> None:
        self._target.write_empty_element(name)

    def write_end_element(self) -> None:
        self._target.write_end_element()

    def write_default_namespace(self, uri: str) -> None:
        self._target.write_default_namespace(uri)

    def write_namespace(self, prefix: str, uri: str) -> None:
        self._target.write_namespace(prefix, uri)

    def write_attribute(self, name: str, value: str) -> None:
        self._target.write_attribute(name, escape_preprocessor(value))

    def write_characters(self, text: str) -> None:
        self._target.write_characters(escape_preprocessor(text))

    def write_character_slice(self, buffer: Sequence[str], start: int, length: int) -> None:
        # The escaped text may be longer than the slice; forward it as a string.
        self._target.write_characters(
            escape_preprocessor("".join(buffer[start : start + length]))
        )

    def write_cdata(self, text: str) -> None:
        self._target.write_cdata(escape_preprocessor(text))

    def write_comment(self, text: str) -> None:
        self._target.write_comment(text)

    def write_processing_instruction(self, target: str, data: str | None = None) -> None:
        self._target.write_processing_instruction(target, data)

    def flush(self) -> None:
        self._target.flush()


__all__ = ["DOLLAR_PATTERN", "PreprocessorEscapingWriter", "escape_preprocessor"]
