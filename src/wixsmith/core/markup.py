"""Streaming XML emission primitives.

The :class:`MarkupSink` protocol is the narrow surface fragment producers write
through. :class:`XmlStreamWriter` implements it on top of a text stream in the
StAX manner: a start tag stays open until the next structural or text call so
that attributes and namespace declarations can still be appended to it.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
import io
import logging
from pathlib import Path
import re
from typing import Protocol, TextIO, runtime_checkable
from xml.sax.saxutils import escape

from .exceptions import MarkupError


logger = logging.getLogger(__name__)

_NAME_PATTERN = re.compile(r"^[A-Za-z_][\w.\-]*(?::[A-Za-z_][\w.\-]*)?$")
_ATTRIBUTE_ENTITIES = {'"': "&quot;", "\n": "&#10;", "\r": "&#13;", "\t": "&#9;"}
_INVALID_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


@runtime_checkable
class MarkupSink(Protocol):
    """Minimal streaming markup API consumed by fragment producers."""

    def write_start_document(self, version: str = "1.0", encoding: str = "utf-8") -> None: ...

    def write_end_document(self) -> None: ...

    def write_start_element(self, name: str) -> None: ...

    def write_empty_element(self, name: str) -> None: ...

    def write_end_element(self) -> None: ...

    def write_default_namespace(self, uri: str) -> None: ...

    def write_namespace(self, prefix: str, uri: str) -> None: ...

    def write_attribute(self, name: str, value: str) -> None: ...

    def write_characters(self, text: str) -> None: ...

    def write_character_slice(self, buffer: Sequence[str], start: int, length: int) -> None: ...

    def write_cdata(self, text: str) -> None: ...

    def write_comment(self, text: str) -> None: ...

    def write_processing_instruction(self, target: str, data: str | None = None) -> None: ...

    def flush(self) -> None: ...


MarkupConsumer = Callable[[MarkupSink], None]


@dataclass(slots=True)
class _OpenElement:
    name: str
    empty: bool = False
    has_children: bool = False
    has_text: bool = False
    attributes: set[str] = field(default_factory=set)


class XmlStreamWriter:
    """Write well-formed XML incrementally to a text stream."""

    def __init__(self, stream: TextIO, *, indent: str | None = "    ") -> None:
        self._stream = stream
        self._indent = indent
        self._stack: list[_OpenElement] = []
        self._start_open = False
        self._started = False
        self._root_closed = False

    @property
    def depth(self) -> int:
        """Return the number of currently open elements."""
        return len(self._stack)

    def write_start_document(self, version: str = "1.0", encoding: str = "utf-8") -> None:
        if self._started:
            raise MarkupError("XML declaration must be the first item of the document.")
        self._stream.write(f'<?xml version="{version}" encoding="{encoding}"?>')
        self._started = True

    def write_end_document(self) -> None:
        self._close_start_tag()
        while self._stack:
            self.write_end_element()
        if self._started:
            self._stream.write("\n")

    def write_start_element(self, name: str) -> None:
        self._open_element(name, empty=False)

    def write_empty_element(self, name: str) -> None:
        self._open_element(name, empty=True)

    def write_end_element(self) -> None:
        if self._start_open and not self._stack[-1].empty:
            self._start_open = False
            self._stream.write("/>")
            self._pop()
            return
        self._close_start_tag()
        if not self._stack:
            raise MarkupError("End element written without a matching start element.")
        element = self._stack[-1]
        if self._indent is not None and element.has_children and not element.has_text:
            self._newline(len(self._stack) - 1)
        self._stream.write(f"</{element.name}>")
        self._pop()

    def write_default_namespace(self, uri: str) -> None:
        self._write_raw_attribute("xmlns", uri)

    def write_namespace(self, prefix: str, uri: str) -> None:
        if not prefix or prefix == "xmlns":
            self.write_default_namespace(uri)
            return
        self._write_raw_attribute(f"xmlns:{prefix}", uri)

    def write_attribute(self, name: str, value: str) -> None:
        self._write_raw_attribute(name, value)

    def write_characters(self, text: str) -> None:
        if not text:
            return
        self._close_start_tag()
        if not self._stack:
            if text.strip():
                raise MarkupError("Text content written outside of the root element.")
            return
        _check_characters(text, "text content")
        self._stack[-1].has_text = True
        self._stream.write(escape(text))

    def write_character_slice(self, buffer: Sequence[str], start: int, length: int) -> None:
        self.write_characters("".join(buffer[start : start + length]))

    def write_cdata(self, text: str) -> None:
        _check_characters(text, "CDATA section")
        self._close_start_tag()
        if not self._stack:
            raise MarkupError("CDATA section written outside of the root element.")
        self._stack[-1].has_text = True
        payload = text.replace("]]>", "]]]]><![CDATA[>")
        self._stream.write(f"<![CDATA[{payload}]]>")

    def write_comment(self, text: str) -> None:
        if "--" in text or text.endswith("-"):
            raise MarkupError(f"Comment text cannot contain '--' or end with '-': {text!r}")
        _check_characters(text, "comment")
        self._before_node()
        self._stream.write(f"<!--{text}-->")

    def write_processing_instruction(self, target: str, data: str | None = None) -> None:
        if not _NAME_PATTERN.match(target) or target.lower() == "xml":
            raise MarkupError(f"Invalid processing instruction target: {target!r}")
        if data is not None and "?>" in data:
            raise MarkupError("Processing instruction data cannot contain '?>'.")
        if data is not None:
            _check_characters(data, "processing instruction")
        self._before_node()
        suffix = f" {data}" if data else ""
        self._stream.write(f"<?{target}{suffix}?>")

    def flush(self) -> None:
        self._stream.flush()

    def _open_element(self, name: str, *, empty: bool) -> None:
        _validate_name(name, "element")
        self._close_start_tag()
        if not self._stack and self._root_closed:
            raise MarkupError(f"Cannot start element '{name}': the document already has a root.")
        self._before_node()
        self._stream.write(f"<{name}")
        self._stack.append(_OpenElement(name, empty=empty))
        self._start_open = True

    def _write_raw_attribute(self, name: str, value: str) -> None:
        if not self._start_open:
            raise MarkupError(f"Attribute '{name}' written outside of a start tag.")
        _validate_name(name, "attribute")
        element = self._stack[-1]
        if name in element.attributes:
            raise MarkupError(f"Duplicate attribute '{name}' on element '{element.name}'.")
        value = str(value)
        _check_characters(value, f"attribute '{name}'")
        element.attributes.add(name)
        self._stream.write(f' {name}="{escape(value, _ATTRIBUTE_ENTITIES)}"')

    def _close_start_tag(self) -> None:
        if not self._start_open:
            return
        self._start_open = False
        if self._stack[-1].empty:
            self._stream.write("/>")
            self._pop()
        else:
            self._stream.write(">")

    def _before_node(self) -> None:
        self._close_start_tag()
        if self._stack:
            parent = self._stack[-1]
            parent.has_children = True
            if self._indent is not None and not parent.has_text:
                self._newline(len(self._stack))
        elif self._started:
            self._stream.write("\n")
        self._started = True

    def _pop(self) -> None:
        self._stack.pop()
        if not self._stack:
            self._root_closed = True

    def _newline(self, depth: int) -> None:
        self._stream.write("\n" + (self._indent or "") * depth)


def _validate_name(name: str, kind: str) -> None:
    if not isinstance(name, str) or not _NAME_PATTERN.match(name):
        raise MarkupError(f"Invalid {kind} name: {name!r}")


def _check_characters(text: str, context: str) -> None:
    match = _INVALID_CHARS.search(text)
    if match is not None:
        raise MarkupError(f"Character {match.group()!r} is not allowed in XML {context}.")


def create_xml(
    path: Path,
    consumer: MarkupConsumer,
    *,
    indent: str | None = "    ",
    encoding: str = "utf-8",
) -> Path:
    """Render a complete XML document and persist it to ``path``.

    The document is rendered in memory first; nothing is written to disk when
    the consumer raises.
    """
    buffer = io.StringIO()
    writer = XmlStreamWriter(buffer, indent=indent)
    writer.write_start_document(encoding=encoding)
    consumer(writer)
    writer.write_end_document()

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(buffer.getvalue(), encoding=encoding)
    logger.debug("Wrote XML document %s", path)
    return path


__all__ = [
    "MarkupConsumer",
    "MarkupSink",
    "XmlStreamWriter",
    "create_xml",
]
