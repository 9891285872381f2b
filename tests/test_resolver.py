"""Tests for value resolution and the parse() entry point.

Validates that:
    - Every value form resolves to the documented variant
    - Inline comments never leak into values
    - Pin specifiers stay opaque strings
    - Multiline forms flatten / join in document order
    - Duplicate keys and section headers are rejected
    - The reference cartesian config resolves end to end
"""

from __future__ import annotations

import pytest

from gantry_config.cfg import (
    ConfigDocument,
    DuplicateEntry,
    Number,
    NumberArray,
    Ratio,
    String,
    StringArray,
    parse,
)


def _value(value_text: str):
    return parse(f"[s]\nk: {value_text}\n").section("s").value("k")


# ---------------------------------------------------------------------------
# Single values
# ---------------------------------------------------------------------------


class TestValues:
    @pytest.mark.parametrize("text, expected", [
        ("500", Number(500.0)),
        ("16 ; full steps", Number(16.0)),
        ("-1.5e-3", Number(-0.0015)),
        ("5.", Number(5.0)),
        ("1E3", Number(1000.0)),
        ("0.500", Number(0.5)),
        ("1,2", NumberArray((1.0, 2.0))),
        ("0.4, 1.75, -2", NumberArray((0.4, 1.75, -2.0))),
        ("16:1", Ratio(((16.0, 1.0),))),
        ("80:16, 3:1", Ratio(((80.0, 16.0), (3.0, 1.0)))),
        ("PF0", String("PF0")),
        ("EPCOS 100K B57560G104F", String("EPCOS 100K B57560G104F")),
        ("/dev/ttyACM0", String("/dev/ttyACM0")),
        ("EXP1_1=PE9, EXP1_2=PE10", StringArray(("EXP1_1=PE9", "EXP1_2=PE10"))),
    ])
    def test_resolves(self, text: str, expected) -> None:
        assert _value(text) == expected

    def test_microsteps_comment_discarded(self) -> None:
        doc = parse("[stepper_x]\nmicrosteps: 16 ; full steps\n")
        assert doc.value("stepper_x", "microsteps") == Number(16.0)

    @pytest.mark.parametrize("pin", ["!PD7", "^PE5", "^!PG6", "!^PA0"])
    def test_pin_prefixes_kept(self, pin: str) -> None:
        assert _value(pin) == String(pin)

    def test_string_internal_whitespace_preserved(self) -> None:
        assert _value("a   b\t c   ; note") == String("a   b\t c")

    def test_hash_inside_string_is_content(self) -> None:
        # Only ';' ends a string value
        assert _value("EPCOS 100K # thermistor") == String("EPCOS 100K # thermistor")

    def test_empty_value(self) -> None:
        assert _value("") == String("")

    def test_string_array_elements_trimmed(self) -> None:
        assert _value("  a ,b  ,  c ") == StringArray(("a", "b", "c"))

    def test_ratio_reduced_value(self) -> None:
        assert _value("80:16, 3:1").value == pytest.approx(15.0)


# ---------------------------------------------------------------------------
# Multiline values
# ---------------------------------------------------------------------------


class TestMultiline:
    def test_number_array_flattened_across_lines(self) -> None:
        text = "[s]\npoints:\n  1, 2\n  3\n  4, 5, 6 ; last row\n"
        value = parse(text).section("s").value("points")
        assert value == NumberArray((1.0, 2.0, 3.0, 4.0, 5.0, 6.0))

    def test_single_continuation_number(self) -> None:
        assert parse("[s]\nk:\n    7\n").section("s").value("k") == NumberArray((7.0,))

    def test_string_lines_joined_with_newline(self) -> None:
        text = "[gcode_macro START]\ngcode:\n    G28\n    # comment line\n    G1 X10   Y10 ; move\n"
        value = parse(text).section("gcode_macro", "START").value("gcode")
        assert value == String("G28\nG1 X10   Y10")

    def test_next_option_after_multiline(self) -> None:
        text = "[s]\ngcode:\n  G28\n\nspeed: 50\n"
        section = parse(text).section("s")
        assert section.keys() == ("gcode", "speed")
        assert section.value("speed") == Number(50.0)


# ---------------------------------------------------------------------------
# Duplicate policy
# ---------------------------------------------------------------------------


class TestDuplicates:
    def test_duplicate_key_rejected(self) -> None:
        with pytest.raises(DuplicateEntry) as info:
            parse("[s]\nk: 1\nk: 2\n", source_name="p.cfg")
        err = info.value
        assert err.span.line == 3
        assert err.first_span.line == 2
        assert str(err).startswith("p.cfg:3:1: duplicate option 'k'")

    def test_duplicate_section_rejected(self) -> None:
        with pytest.raises(DuplicateEntry) as info:
            parse("[a]\nk: 1\n\n[a]\nk: 2\n")
        assert info.value.span.line == 4
        assert info.value.first_span.line == 1

    def test_same_type_different_instances_allowed(self) -> None:
        doc = parse("[fan x]\n[fan y]\n[fan]\n")
        assert len(doc) == 3

    def test_same_key_in_different_sections_allowed(self) -> None:
        doc = parse("[a]\nk: 1\n[b]\nk: 2\n")
        assert doc.value("b", "k") == Number(2.0)


# ---------------------------------------------------------------------------
# Reference document
# ---------------------------------------------------------------------------


class TestReferenceDocument:
    def test_section_order(self, cartesian_doc: ConfigDocument) -> None:
        assert [s.type_name for s in cartesian_doc.sections()] == [
            "stepper_x", "stepper_y", "stepper_z",
            "extruder", "heater_bed", "mcu", "printer",
        ]

    def test_values(self, cartesian_doc: ConfigDocument) -> None:
        doc = cartesian_doc
        assert doc.value("stepper_x", "step_pin") == String("PF0")
        assert doc.value("stepper_x", "dir_pin") == String("PF1")
        assert doc.value("extruder", "pid_Kp") == Number(22.2)
        assert doc.value("printer", "max_velocity") == Number(500.0)
        assert doc.value("mcu", "serial") == String("/dev/ttyACM0")

    def test_last_line_without_newline(self, cartesian_doc: ConfigDocument) -> None:
        assert cartesian_doc.value("printer", "max_z_accel") == Number(30.0)

    def test_source_name_recorded(self, cartesian_doc: ConfigDocument) -> None:
        assert cartesian_doc.source_name == "example-cartesian.cfg"
