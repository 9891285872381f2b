"""Turn grammar parse trees into typed configuration documents.

This is a purely syntactic transformation: numbers become floats, strings
are trimmed of the insignificant whitespace around them, and nothing is
range-checked or unit-converted.

Policies
--------
- Multiline strings join their trimmed continuation lines with ``"\\n"``.
- Multiline number arrays flatten all continuation lines into one tuple.
- A repeated key inside a section, or a repeated ``[type instance]``
  header, raises ``DuplicateEntry``; there is no first-wins or last-wins.
"""

from __future__ import annotations

import logging

from gantry_config.cfg.document import ConfigDocument, KeyValue, Section
from gantry_config.cfg.errors import DuplicateEntry, SourceSpan
from gantry_config.cfg.grammar import Node, ParseTree, Rule, parse_tree
from gantry_config.cfg.values import (
    Number,
    NumberArray,
    Ratio,
    String,
    StringArray,
    Value,
)

logger = logging.getLogger(__name__)

_WS = " \t\r"


def resolve_value(tree: ParseTree, node: Node) -> Value:
    """Convert one matched value node into its ``Value`` variant."""
    rule = node.rule
    if rule is Rule.NUMBER:
        return Number(float(tree.text_of(node)))
    if rule in (Rule.NUMBER_ARRAY, Rule.MULTILINE_NUMBER_ARRAY):
        return NumberArray(tuple(float(tree.text_of(c)) for c in node.children))
    if rule is Rule.RATIO:
        return Ratio(tuple(
            (float(tree.text_of(num)), float(tree.text_of(den)))
            for num, den in (pair.children for pair in node.children)
        ))
    if rule is Rule.SINGLE_LINE_STRING:
        return String(tree.text_of(node).strip(_WS))
    if rule is Rule.MULTILINE_STRING:
        return String("\n".join(tree.text_of(c).strip(_WS) for c in node.children))
    if rule is Rule.STRING_ARRAY:
        return StringArray(tuple(tree.text_of(c).strip(_WS) for c in node.children))
    raise ValueError(f"Not a value node: {rule}")


def _resolve_section(tree: ParseTree, node: Node) -> Section:
    names = [c for c in node.children if c.rule is Rule.IDENT]
    type_name = tree.text_of(names[0])
    instance_name = tree.text_of(names[1]) if len(names) > 1 else None

    items: list[KeyValue] = []
    seen: dict[str, SourceSpan] = {}
    for kv in node.children:
        if kv.rule is not Rule.KEY_VALUE:
            continue
        key_node, value_node = kv.children
        key = tree.text_of(key_node)
        span = tree.span_of(kv)
        if key in seen:
            raise DuplicateEntry(
                f"option '{key}' in section [{type_name}"
                f"{'' if instance_name is None else ' ' + instance_name}]",
                span,
                seen[key],
                tree.source_name,
            )
        seen[key] = span
        items.append(KeyValue(key, resolve_value(tree, value_node), span))

    return Section(type_name, instance_name, tuple(items), tree.span_of(node))


def resolve_document(tree: ParseTree) -> ConfigDocument:
    """Build a ``ConfigDocument`` from a parse tree.

    Raises
    ------
    DuplicateEntry
        On the second occurrence of a key or section header.
    """
    sections: list[Section] = []
    seen: dict[tuple[str, str | None], SourceSpan] = {}
    for node in tree.root.children:
        section = _resolve_section(tree, node)
        ident = (section.type_name, section.instance_name)
        if ident in seen:
            raise DuplicateEntry(
                f"section [{section.name}]",
                section.span,
                seen[ident],
                tree.source_name,
            )
        seen[ident] = section.span
        sections.append(section)
    return ConfigDocument(sections, source_name=tree.source_name)


def parse(text: str, source_name: str | None = None) -> ConfigDocument:
    """Parse configuration text into an immutable ``ConfigDocument``.

    Parameters
    ----------
    text : str
        Complete configuration text.  No I/O is performed.
    source_name : str | None
        Label for error messages, typically the file path.

    Returns
    -------
    ConfigDocument
        Sections in declaration order.

    Raises
    ------
    ConfigSyntaxError
        If the text does not match the grammar.
    DuplicateEntry
        If a key or section header repeats.

    Examples
    --------
    >>> doc = parse("[printer]\\nmax_velocity: 500\\n")
    >>> doc.section("printer").as_number("max_velocity")
    500.0
    """
    tree = parse_tree(text, source_name)
    doc = resolve_document(tree)
    logger.debug(
        "Parsed %d section(s) from %s", len(doc), source_name or "<string>",
    )
    return doc
