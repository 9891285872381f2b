"""
Gantry Config Package.

Parser and typed value model for the printer configuration language read by
a multi-instance 3D-printer host.  Turns hand-edited ``printer.cfg`` text into
an immutable, ordered document that device builders query for typed
settings.

Subpackages:
    cfg: Grammar, value resolver, section model, errors, writer
    host: Host YAML (instances, logging) and per-instance config loading
    utils: Filesystem and logging helpers
    scripts: check_cfg command-line validator
"""

from gantry_config.cfg import (
    ConfigDocument,
    ConfigError,
    ConfigSyntaxError,
    DuplicateEntry,
    MissingKey,
    Number,
    NumberArray,
    Ratio,
    Section,
    SectionNotFound,
    String,
    StringArray,
    TypeMismatch,
    Value,
    format_document,
    parse,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigDocument",
    "ConfigError",
    "ConfigSyntaxError",
    "DuplicateEntry",
    "MissingKey",
    "Number",
    "NumberArray",
    "Ratio",
    "Section",
    "SectionNotFound",
    "String",
    "StringArray",
    "TypeMismatch",
    "Value",
    "format_document",
    "parse",
]
