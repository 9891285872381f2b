"""Test filesystem helpers.

Tests for gantry_config.utils.fs:
    - Atomic writes replace the target and leave no tmp file behind
    - ensure_dir creates parents
    - read_text / load_yaml report missing files
    - load_yaml rejects malformed YAML

Run:
    pytest tests/test_fs.py -v
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from gantry_config.utils import fs


def test_ensure_dir(tmp_path: Path) -> None:
    target = fs.ensure_dir(tmp_path / "a" / "b")
    assert target.is_dir()
    assert fs.ensure_dir(target) == target


def test_atomic_write_text_replaces(tmp_path: Path) -> None:
    target = tmp_path / "printer.cfg"
    target.write_text("old\n", encoding="utf-8")
    fs.atomic_write_text(target, "[mcu]\nserial: /dev/ttyACM0\n")
    assert target.read_text(encoding="utf-8") == "[mcu]\nserial: /dev/ttyACM0\n"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["printer.cfg"]


def test_atomic_write_bytes_creates_parent(tmp_path: Path) -> None:
    target = tmp_path / "nested" / "blob.bin"
    fs.atomic_write_bytes(target, b"\x00\x01")
    assert target.read_bytes() == b"\x00\x01"


def test_read_text_utf8(tmp_path: Path) -> None:
    target = tmp_path / "p.cfg"
    target.write_text("# café\n", encoding="utf-8")
    assert fs.read_text(target) == "# café\n"


def test_read_text_drops_bom(tmp_path: Path) -> None:
    target = tmp_path / "p.cfg"
    target.write_bytes(b"\xef\xbb\xbf[mcu]\n")
    assert fs.read_text(target) == "[mcu]\n"


def test_read_text_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        fs.read_text(tmp_path / "nope.cfg")


def test_load_yaml(tmp_path: Path) -> None:
    target = tmp_path / "gantry.yaml"
    target.write_text("instances:\n  a:\n    config_path: a.cfg\n", encoding="utf-8")
    assert fs.load_yaml(target) == {"instances": {"a": {"config_path": "a.cfg"}}}


def test_load_yaml_malformed(tmp_path: Path) -> None:
    target = tmp_path / "gantry.yaml"
    target.write_text("a: [1, 2\n", encoding="utf-8")
    with pytest.raises(yaml.YAMLError, match="gantry.yaml"):
        fs.load_yaml(target)


def test_load_yaml_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        fs.load_yaml(tmp_path / "nope.yaml")
