"""Printer configuration language: grammar, typed values, section model."""

from gantry_config.cfg.document import ConfigDocument, KeyValue, Section
from gantry_config.cfg.errors import (
    ConfigError,
    ConfigSyntaxError,
    DuplicateEntry,
    MissingKey,
    SectionNotFound,
    SourceSpan,
    TypeMismatch,
)
from gantry_config.cfg.resolver import parse
from gantry_config.cfg.values import (
    Number,
    NumberArray,
    Ratio,
    String,
    StringArray,
    Value,
)
from gantry_config.cfg.writer import format_document, write_document

__all__ = [
    "ConfigDocument",
    "ConfigError",
    "ConfigSyntaxError",
    "DuplicateEntry",
    "KeyValue",
    "MissingKey",
    "Number",
    "NumberArray",
    "Ratio",
    "Section",
    "SectionNotFound",
    "SourceSpan",
    "String",
    "StringArray",
    "TypeMismatch",
    "Value",
    "format_document",
    "parse",
    "write_document",
]
