from __future__ import annotations

import pytest

from wixsmith.core.variables import TRUTHY_VALUE, WixVariables


def test_table_reports_absence_until_first_write() -> None:
    table = WixVariables()

    assert table.values() is None
    assert not table
    assert len(table) == 0


def test_define_sets_truthy_flag() -> None:
    table = WixVariables()
    table.define("FOO")

    assert dict(table.values()) == {"FOO": TRUTHY_VALUE}
    assert TRUTHY_VALUE == "yes"
    assert "FOO" in table


def test_set_overwrites_and_keeps_insertion_order() -> None:
    table = WixVariables()
    table.set("B", "1")
    table.set("A", "2")
    table.set("B", "3")

    assert list(table.values().items()) == [("B", "3"), ("A", "2")]


def test_snapshot_is_read_only_and_detached() -> None:
    table = WixVariables()
    table.set("A", "1")
    snapshot = table.values()

    with pytest.raises(TypeError):
        snapshot["A"] = "2"  # type: ignore[index]

    table.set("A", "changed")
    assert snapshot["A"] == "1"


def test_invalid_names_and_values_are_rejected() -> None:
    table = WixVariables()

    with pytest.raises(ValueError):
        table.set("", "x")
    with pytest.raises(TypeError):
        table.set("A", 1)  # type: ignore[arg-type]
    assert table.values() is None
