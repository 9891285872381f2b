"""Tests for rendering documents back to config text."""

from __future__ import annotations

import math
from pathlib import Path

import pytest

from gantry_config.cfg import (
    ConfigDocument,
    ConfigError,
    Number,
    NumberArray,
    Section,
    String,
    StringArray,
    format_document,
    parse,
    write_document,
)
from gantry_config.cfg.document import KeyValue
from gantry_config.cfg.values import format_number


def _doc(*items: tuple[str, object]) -> ConfigDocument:
    kvs = tuple(KeyValue(k, v) for k, v in items)
    return ConfigDocument([Section("s", None, kvs)])


class TestFormatNumber:
    @pytest.mark.parametrize("value, text", [
        (16.0, "16"),
        (-3.0, "-3"),
        (0.5, "0.5"),
        (22.2, "22.2"),
        (1e20, "1e+20"),
        (-0.0015, "-0.0015"),
    ])
    def test_format(self, value: float, text: str) -> None:
        assert format_number(value) == text


class TestFormatDocument:
    def test_exact_layout(self) -> None:
        doc = parse("[a]\nk: 16\nr:80:16,3:1 ; gears\n[b x]\ns: PF0\n")
        assert format_document(doc) == "[a]\nk: 16\nr: 80:16, 3:1\n\n[b x]\ns: PF0\n"

    def test_cartesian_round_trip(self, cartesian_doc: ConfigDocument) -> None:
        text = format_document(cartesian_doc)
        assert parse(text) == cartesian_doc

    def test_empty_document(self) -> None:
        assert format_document(ConfigDocument()) == ""

    def test_multiline_string(self) -> None:
        doc = _doc(("gcode", String("G28\nG1 Z5")))
        assert format_document(doc) == "[s]\ngcode:\n    G28\n    G1 Z5\n"

    def test_single_element_array_stays_array(self) -> None:
        doc = _doc(("k", NumberArray((7.0,))))
        text = format_document(doc)
        assert text == "[s]\nk:\n    7\n"
        assert parse(text).value("s", "k") == NumberArray((7.0,))

    def test_string_array_and_empty_string(self) -> None:
        doc = _doc(("a", StringArray(("x", "y"))), ("b", String("")))
        assert format_document(doc) == "[s]\na: x, y\nb:\n"

    @pytest.mark.parametrize("value", [
        Number(math.nan),
        String("a;b"),
        String("16"),
        NumberArray(()),
    ])
    def test_unrepresentable_values_rejected(self, value) -> None:
        with pytest.raises(ConfigError):
            format_document(_doc(("k", value)))

    def test_verify_can_be_disabled(self) -> None:
        text = format_document(_doc(("k", String("16"))), verify=False)
        assert text == "[s]\nk: 16\n"


class TestWriteDocument:
    def test_writes_file(self, tmp_path: Path, cartesian_doc: ConfigDocument) -> None:
        target = tmp_path / "out" / "printer.cfg"
        write_document(cartesian_doc, target)
        assert parse(target.read_text(encoding="utf-8")) == cartesian_doc

    def test_failed_render_leaves_no_file(self, tmp_path: Path) -> None:
        target = tmp_path / "printer.cfg"
        with pytest.raises(ConfigError):
            write_document(_doc(("k", String("a;b"))), target)
        assert not target.exists()
