"""Render a ``ConfigDocument`` back to printer config surface syntax.

Output layout::

    [stepper_x]
    step_pin: PF0
    microsteps: 16

    [gcode_macro START]
    gcode:
        G28
        G1 Z5

Numbers print as integers when integral (``16``) and with ``repr`` otherwise,
so every float survives a round trip bit for bit.  The rendered text is
parsed again before it is returned; a value the dialect cannot express
(``nan``, a string containing ``;``, a string that reads as a number, ...)
raises ``ConfigError`` instead of silently changing type.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gantry_config.cfg.document import ConfigDocument, Section
from gantry_config.cfg.errors import ConfigError
from gantry_config.cfg.resolver import parse
from gantry_config.cfg.values import (
    Number,
    NumberArray,
    Ratio,
    String,
    StringArray,
    Value,
    format_number,
)
from gantry_config.utils import fs

logger = logging.getLogger(__name__)

INDENT = "    "


def _format_value(key: str, value: Value) -> list[str]:
    """Return the source lines for one option."""
    if isinstance(value, Number):
        return [f"{key}: {format_number(value.value)}"]
    if isinstance(value, Ratio):
        return [f"{key}: {value}"]
    if isinstance(value, NumberArray):
        if not value.values:
            raise ConfigError(f"Option '{key}': empty number array cannot be written")
        if len(value.values) == 1:
            # A lone number on the key line would read back as Number.
            return [f"{key}:", INDENT + format_number(value.values[0])]
        return [f"{key}: {value}"]
    if isinstance(value, String):
        if "\n" in value.value:
            return [f"{key}:"] + [INDENT + line for line in value.value.split("\n")]
        return [f"{key}: {value.value}" if value.value else f"{key}:"]
    if isinstance(value, StringArray):
        return [f"{key}: {value}"]
    raise ConfigError(f"Option '{key}': unsupported value {value!r}")


def _format_section(section: Section) -> list[str]:
    lines = [f"[{section.name}]"]
    for kv in section.items:
        lines.extend(_format_value(kv.key, kv.value))
    return lines


def _first_difference(expected: ConfigDocument, actual: ConfigDocument) -> str:
    for want, got in zip(expected.sections(), actual.sections()):
        if (want.type_name, want.instance_name) != (got.type_name, got.instance_name):
            return f"section [{want.name}]"
        for a, b in zip(want.items, got.items):
            if a != b:
                return (
                    f"option '{a.key}' in section [{want.name}] "
                    f"({a.value!r} reads back as {b.value!r})"
                )
        if len(want.items) != len(got.items):
            return f"section [{want.name}]"
    return "document structure"


def format_document(doc: ConfigDocument, verify: bool = True) -> str:
    """Render *doc* as configuration text.

    Parameters
    ----------
    doc : ConfigDocument
        Document to render.
    verify : bool
        Re-parse the output and require it to equal *doc*.

    Returns
    -------
    str
        Text ending in a newline (empty for an empty document).

    Raises
    ------
    ConfigError
        If a value cannot be represented faithfully.
    """
    blocks = ["\n".join(_format_section(s)) for s in doc.sections()]
    text = "\n\n".join(blocks) + "\n" if blocks else ""

    if verify:
        try:
            reparsed = parse(text, source_name="<rendered>")
        except ConfigError as exc:
            raise ConfigError(f"Rendered config does not parse back: {exc}") from exc
        if reparsed != doc:
            raise ConfigError(
                "Value cannot be represented in config syntax: "
                f"{_first_difference(doc, reparsed)}"
            )
    return text


def write_document(doc: ConfigDocument, path: str | Path) -> None:
    """Render *doc* and write it atomically to *path*."""
    text = format_document(doc)
    fs.atomic_write_text(path, text)
    logger.info("Wrote %d section(s) to %s", len(doc), path)
