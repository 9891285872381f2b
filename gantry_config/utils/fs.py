"""File I/O for printer configs and host files.

A running host may re-read ``printer.cfg`` at any moment, so rendered
configs are replaced in one rename and never written in place.

Usage:
    from gantry_config.utils import fs
    text = fs.read_text("printer.cfg")
    fs.atomic_write_text("printer.cfg", text)
    data = fs.load_yaml("gantry.yaml")
"""

import os
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    """Create *p* (and parents) if missing; return it as a ``Path``."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Replace *path* with *data* via a sibling tmp file and ``os.replace``.

    Parameters
    ----------
    path : str | Path
        Target file.  Missing parent directories are created.
    data : bytes
        Full new content.

    Raises
    ------
    RuntimeError
        If the tmp file cannot be written or renamed; the tmp file is
        removed and *path* is left untouched.
    """
    path = Path(path)
    ensure_dir(path.parent)
    tmp = path.with_name(f".{path.name}.{os.getpid()}.tmp")

    try:
        with open(tmp, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise RuntimeError(f"Could not write {path}: {e}") from e


def atomic_write_text(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    atomic_write_bytes(path, text.encode(encoding))


def read_text(path: PathLike) -> str:
    """Read a config file as text.

    A UTF-8 byte order mark, which some editors prepend, is dropped so the
    first section header still starts in column 1.

    Raises
    ------
    FileNotFoundError
        If *path* doesn't exist.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Config file not found: {path}")
    return path.read_text(encoding="utf-8-sig")


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML file with ``yaml.safe_load``.

    Returns ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If *path* doesn't exist.
    yaml.YAMLError
        With *path* prepended to the parser's message.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"YAML file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            return yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"{path}: {e}") from e
