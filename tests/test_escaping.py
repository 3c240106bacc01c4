from __future__ import annotations

import re

import pytest

from wixsmith.core.escaping import PreprocessorEscapingWriter, escape_preprocessor


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("Price: $5 or $(var.Currency)", "Price: $$5 or $(var.Currency)"),
        ("$(unterminated", "$$(unterminated"),
        ("", ""),
        ("$", "$$"),
        ("$$$", "$$$$$$"),
        ("$()", "$()"),
        ("$$(a)", "$$$(a)"),
        ("$(a)$(b)", "$(a)$(b)"),
        ("$(a)$", "$(a)$$"),
        ("cost $ (approx)", "cost $$ (approx)"),
        ("$(sys.SOURCEFILEDIR)app.exe", "$(sys.SOURCEFILEDIR)app.exe"),
    ],
)
def test_escape_preprocessor(text: str, expected: str) -> None:
    assert escape_preprocessor(text) == expected


@pytest.mark.parametrize("text", ["", "plain", "C:\\Program Files\\App", "(var.x)", "100%"])
def test_escape_is_identity_without_dollar(text: str) -> None:
    assert escape_preprocessor(text) == text


@pytest.mark.parametrize(
    "text",
    ["a$b", "$(x) and $y", "$$$(env.PATH)$", "no refs $ here $"],
)
def test_bare_dollars_are_doubled_and_references_preserved(text: str) -> None:
    reference = re.compile(r"\$\([^)]*\)")
    escaped = escape_preprocessor(text)

    bare_in = text.count("$") - len(reference.findall(text))
    bare_out = escaped.count("$") - len(reference.findall(escaped))

    assert bare_out == 2 * bare_in
    assert reference.findall(escaped) == reference.findall(text)


def test_escaping_is_scoped_to_a_single_call() -> None:
    assert escape_preprocessor("a") + escape_preprocessor("$b") == escape_preprocessor("a$b")
    # A reference split across calls is not recognised.
    assert escape_preprocessor("$") + escape_preprocessor("(var.x)") == "$$(var.x)"


class RecordingSink:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def __getattr__(self, name: str):
        if not name.startswith("write_") and name != "flush":
            raise AttributeError(name)

        def _record(*args):
            self.calls.append((name, *args))

        return _record


def test_writer_escapes_text_and_attribute_values() -> None:
    sink = RecordingSink()
    writer = PreprocessorEscapingWriter(sink)

    writer.write_attribute("Value", "$5")
    writer.write_characters("cost $ $(var.Cost)")
    writer.write_character_slice(list("xx$yy"), 1, 3)
    writer.write_cdata("echo $HOME")

    assert sink.calls == [
        ("write_attribute", "Value", "$$5"),
        ("write_characters", "cost $$ $(var.Cost)"),
        ("write_characters", "x$$y"),
        ("write_cdata", "echo $$HOME"),
    ]


def test_writer_forwards_structural_calls_unchanged() -> None:
    sink = RecordingSink()
    writer = PreprocessorEscapingWriter(sink)

    writer.write_start_element("Property")
    writer.write_empty_element("Custom")
    writer.write_default_namespace("urn:$default")
    writer.write_namespace("util", "urn:$util")
    writer.write_comment("keep $ as is")
    writer.write_processing_instruction("define", "Name=$x")
    writer.write_end_element()
    writer.flush()

    assert sink.calls == [
        ("write_start_element", "Property"),
        ("write_empty_element", "Custom"),
        ("write_default_namespace", "urn:$default"),
        ("write_namespace", "util", "urn:$util"),
        ("write_comment", "keep $ as is"),
        ("write_processing_instruction", "define", "Name=$x"),
        ("write_end_element",),
        ("flush",),
    ]


def test_writer_passes_empty_text_through() -> None:
    sink = RecordingSink()
    PreprocessorEscapingWriter(sink).write_characters("")

    assert sink.calls == [("write_characters", "")]
