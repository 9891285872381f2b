"""Ordered-choice grammar for printer configuration text.

The dialect is INI-like::

    # comment line
    [stepper_x]                 ; section type
    step_pin: PF0
    microsteps = 16 # inline comments start with ';' or '#'

    [heater_generic chamber]    ; type plus instance name
    gear_ratio: 80:16, 3:1
    position_min:
        1, 2, 3
        4, 5

Grammar (PEG; ``/`` is ordered choice, first match wins)::

    CONFIG     = (BLANKS SECTION)* BLANKS LAST_LINE? EOI
    SECTION    = "[" WS IDENT (WS+ IDENT)? WS "]" TRAILING (NL / EOI)
                 (BLANKS KEY_VALUE (NL / EOI))*
    KEY_VALUE  = IDENT WS (":" / "=") WS VALUE
    VALUE      = MULTILINE_NUMBER_ARRAY / MULTILINE_STRING / RATIO
               / NUMBER_ARRAY / NUMBER / STRING_ARRAY / SINGLE_LINE_STRING
    TRAILING   = WS ((";" / "#") [^\\n]*)? &(NL / EOI)

Every value alternative ends with ``TRAILING``, so an alternative only
matches when the rest of its line is empty or a comment.  Header and key
lines start in column 1; an indented line is always a continuation line.

The parser records the furthest position where a terminal failed to
match together with what was expected there.  When the top-level rule
fails, that position becomes a ``ConfigSyntaxError``.
"""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable

from gantry_config.cfg.errors import ConfigSyntaxError, LineIndex, SourceSpan

logger = logging.getLogger(__name__)

_WS = " \t\r"
_DIGITS = "0123456789"


class Rule(enum.Enum):
    """Parse tree node kinds."""

    CONFIG = "config"
    SECTION = "section"
    IDENT = "ident"
    KEY_VALUE = "key_value"
    MULTILINE_NUMBER_ARRAY = "multiline_number_array"
    MULTILINE_STRING = "multiline_string"
    RATIO = "ratio"
    RATIO_PAIR = "ratio_pair"
    NUMBER_ARRAY = "number_array"
    NUMBER = "number"
    STRING_ARRAY = "string_array"
    STRING = "string"
    SINGLE_LINE_STRING = "single_line_string"


@dataclass(frozen=True, slots=True)
class Node:
    """One matched rule: kind, character range, and child nodes."""

    rule: Rule
    start: int
    end: int
    children: tuple["Node", ...] = ()


@dataclass(frozen=True)
class ParseTree:
    """Result of a successful grammar match."""

    text: str
    root: Node
    lines: LineIndex
    source_name: str | None = None

    def text_of(self, node: Node) -> str:
        return self.text[node.start:node.end]

    def span_of(self, node: Node) -> SourceSpan:
        return self.lines.span(node.start, node.end)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


class _Parser:
    """Recursive-descent matcher; each rule method returns a node or None.

    A rule that fails restores ``self.pos`` to where it started.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        self.n = len(text)
        self.pos = 0
        self._fail_pos = -1
        self._expected: dict[str, None] = {}

    # -- Failure bookkeeping ------------------------------------------------

    def _expect(self, what: str) -> None:
        if self.pos > self._fail_pos:
            self._fail_pos = self.pos
            self._expected = {what: None}
        elif self.pos == self._fail_pos:
            self._expected[what] = None

    def _peek(self) -> str:
        return self.text[self.pos] if self.pos < self.n else ""

    def _at_eol(self) -> bool:
        return self.pos >= self.n or self.text[self.pos] == "\n"

    # -- Lexical helpers ----------------------------------------------------

    def _skip_ws(self) -> int:
        start = self.pos
        while self.pos < self.n and self.text[self.pos] in _WS:
            self.pos += 1
        return self.pos - start

    def _skip_to_eol(self) -> None:
        end = self.text.find("\n", self.pos)
        self.pos = self.n if end < 0 else end

    def _blanks(self) -> None:
        """Consume blank and ``#`` comment lines, each ending in a newline."""
        while True:
            save = self.pos
            self._skip_ws()
            if self._peek() == "#":
                self._skip_to_eol()
            if self._peek() == "\n":
                self.pos += 1
                continue
            self.pos = save
            return

    def _trailing(self, comment_markers: str = ";#") -> bool:
        """Match optional whitespace and inline comment up to end of line."""
        save = self.pos
        self._skip_ws()
        if self.pos < self.n and self.text[self.pos] in comment_markers:
            self._skip_to_eol()
        if self._at_eol():
            return True
        self._expect("end of line")
        self.pos = save
        return False

    def _ident(self, label: str) -> Node | None:
        start = self.pos
        ch = self._peek()
        if not ch or not (ch.isalpha() or ch == "_"):
            self._expect(label)
            return None
        self.pos += 1
        while self.pos < self.n:
            ch = self.text[self.pos]
            if not (ch.isalnum() or ch == "_"):
                break
            self.pos += 1
        return Node(Rule.IDENT, start, self.pos)

    def _digits(self) -> int:
        start = self.pos
        while self.pos < self.n and self.text[self.pos] in _DIGITS:
            self.pos += 1
        return self.pos - start

    def _number(self) -> Node | None:
        start = self.pos
        if self._peek() == "-":
            self.pos += 1
        ch = self._peek()
        if ch == "0":
            self.pos += 1
        elif ch and ch in "123456789":
            self._digits()
        else:
            self._expect("number")
            self.pos = start
            return None
        if self._peek() == ".":
            self.pos += 1
            self._digits()
        if self._peek() in ("e", "E"):
            save = self.pos
            self.pos += 1
            if self._peek() in ("+", "-"):
                self.pos += 1
            if not self._digits():
                self.pos = save
        return Node(Rule.NUMBER, start, self.pos)

    def _literal(self, ch: str) -> bool:
        if self._peek() == ch:
            self.pos += 1
            return True
        self._expect(repr(ch))
        return False

    # -- Value item lists ---------------------------------------------------

    def _number_list(self, min_count: int) -> list[Node] | None:
        start = self.pos
        first = self._number()
        if first is None:
            return None
        items = [first]
        while True:
            save = self.pos
            self._skip_ws()
            if not self._literal(","):
                self.pos = save
                break
            self._skip_ws()
            nxt = self._number()
            if nxt is None:
                self.pos = save
                break
            items.append(nxt)
        if len(items) < min_count:
            self.pos = start
            return None
        return items

    def _ratio_pairs(self) -> list[Node] | None:
        start = self.pos
        pairs: list[Node] = []
        while True:
            save = self.pos
            if pairs:
                self._skip_ws()
                if not self._literal(","):
                    self.pos = save
                    break
                self._skip_ws()
            pair_start = self.pos
            num = self._number()
            if num is not None:
                self._skip_ws()
                if self._literal(":"):
                    self._skip_ws()
                    den = self._number()
                    if den is not None:
                        pairs.append(
                            Node(Rule.RATIO_PAIR, pair_start, self.pos, (num, den))
                        )
                        continue
            self.pos = save
            break
        if not pairs:
            self.pos = start
            return None
        return pairs

    def _string_elements(self) -> list[Node] | None:
        start = self.pos
        items: list[Node] = []
        while True:
            save = self.pos
            if items and not self._literal(","):
                break
            elem_start = self.pos
            while self.pos < self.n and self.text[self.pos] not in "\n;,":
                self.pos += 1
            if not self.text[elem_start:self.pos].strip(_WS):
                self._expect("string")
                self.pos = save
                break
            items.append(Node(Rule.STRING, elem_start, self.pos))
        if len(items) < 2:
            self.pos = start
            return None
        return items

    def _line_string(self, allow_empty: bool) -> Node | None:
        start = self.pos
        while self.pos < self.n and self.text[self.pos] not in "\n;":
            self.pos += 1
        if not allow_empty and not self.text[start:self.pos].strip(_WS):
            self._expect("string")
            self.pos = start
            return None
        return Node(Rule.SINGLE_LINE_STRING, start, self.pos)

    # -- Value alternatives -------------------------------------------------

    def _multiline(
        self,
        rule: Rule,
        block: Callable[[], list[Node] | None],
    ) -> Node | None:
        """Match one or more indented continuation blocks."""
        start = self.pos
        children: list[Node] = []
        while True:
            save = self.pos
            if self._peek() != "\n":
                self._expect("newline")
                break
            self.pos += 1
            self._blanks()
            if not self._skip_ws():
                self._expect("indented continuation line")
                self.pos = save
                break
            items = block()
            if items is None or not self._trailing():
                self.pos = save
                break
            children.extend(items)
        if not children:
            self.pos = start
            return None
        return Node(rule, start, self.pos, tuple(children))

    def _multiline_number_array(self) -> Node | None:
        return self._multiline(
            Rule.MULTILINE_NUMBER_ARRAY, lambda: self._number_list(1),
        )

    def _multiline_string(self) -> Node | None:
        def block() -> list[Node] | None:
            node = self._line_string(allow_empty=False)
            return None if node is None else [node]

        return self._multiline(Rule.MULTILINE_STRING, block)

    def _single_line(
        self,
        rule: Rule,
        items: Callable[[], list[Node] | None],
        comment_markers: str = ";#",
    ) -> Node | None:
        start = self.pos
        children = items()
        if children is None:
            return None
        end = self.pos
        if not self._trailing(comment_markers):
            self.pos = start
            return None
        return Node(rule, start, end, tuple(children))

    def _ratio(self) -> Node | None:
        return self._single_line(Rule.RATIO, self._ratio_pairs)

    def _number_array(self) -> Node | None:
        return self._single_line(Rule.NUMBER_ARRAY, lambda: self._number_list(2))

    def _single_number(self) -> Node | None:
        start = self.pos
        node = self._number()
        if node is None:
            return None
        if not self._trailing():
            self.pos = start
            return None
        return node

    def _string_array(self) -> Node | None:
        return self._single_line(Rule.STRING_ARRAY, self._string_elements, ";")

    def _single_line_string(self) -> Node | None:
        start = self.pos
        node = self._line_string(allow_empty=True)
        if node is None or not self._trailing(";"):
            self.pos = start
            return None
        return node

    def _value(self) -> Node | None:
        for alternative in (
            self._multiline_number_array,
            self._multiline_string,
            self._ratio,
            self._number_array,
            self._single_number,
            self._string_array,
            self._single_line_string,
        ):
            node = alternative()
            if node is not None:
                return node
        return None

    # -- Structure ----------------------------------------------------------

    def _key_value(self) -> Node | None:
        start = self.pos
        key = self._ident("key")
        if key is None:
            return None
        self._skip_ws()
        if self._peek() in (":", "="):
            self.pos += 1
        else:
            self._expect("':' or '='")
            self.pos = start
            return None
        self._skip_ws()
        value = self._value()
        if value is None:
            self.pos = start
            return None
        return Node(Rule.KEY_VALUE, start, self.pos, (key, value))

    def _header(self) -> list[Node] | None:
        start = self.pos
        if not self._literal("["):
            return None
        self._skip_ws()
        type_name = self._ident("section name")
        if type_name is None:
            self.pos = start
            return None
        names = [type_name]
        save = self.pos
        if self._skip_ws():
            instance = self._ident("instance name")
            if instance is not None:
                names.append(instance)
            else:
                self.pos = save
        self._skip_ws()
        if not self._literal("]") or not self._trailing():
            self.pos = start
            return None
        if self._peek() == "\n":
            self.pos += 1
        return names

    def _section(self) -> Node | None:
        start = self.pos
        names = self._header()
        if names is None:
            return None
        children = list(names)
        while True:
            save = self.pos
            self._blanks()
            kv = self._key_value()
            if kv is None:
                self.pos = save
                break
            children.append(kv)
            if self._peek() == "\n":
                self.pos += 1
            else:
                break
        return Node(Rule.SECTION, start, self.pos, tuple(children))

    def parse_config(self) -> Node | None:
        sections: list[Node] = []
        while True:
            save = self.pos
            self._blanks()
            section = self._section()
            if section is None:
                self.pos = save
                break
            sections.append(section)
        self._blanks()
        save = self.pos
        self._skip_ws()
        if self._peek() == "#":
            self._skip_to_eol()
        if self.pos < self.n:
            self.pos = save
            self._expect("end of input")
            return None
        return Node(Rule.CONFIG, 0, self.n, tuple(sections))

    def error(self, lines: LineIndex, source_name: str | None) -> ConfigSyntaxError:
        offset = max(self._fail_pos, 0)
        if offset >= self.n:
            found = "end of input"
        elif self.text[offset] in "\r\n":
            found = "end of line"
        else:
            found = repr(self.text[offset])
        span = lines.span(offset, offset)
        return ConfigSyntaxError(
            span,
            tuple(self._expected) or ("end of input",),
            found,
            lines.byte_offset(offset),
            lines.line_text(span.line),
            source_name,
        )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def parse_tree(text: str, source_name: str | None = None) -> ParseTree:
    """Match *text* against the grammar.

    Parameters
    ----------
    text : str
        Complete configuration text.
    source_name : str | None
        Label used in error messages, typically the file path.

    Returns
    -------
    ParseTree
        Root ``CONFIG`` node whose children are ``SECTION`` nodes.

    Raises
    ------
    ConfigSyntaxError
        At the furthest position no alternative could match.  No partial
        tree is ever returned.
    """
    parser = _Parser(text)
    root = parser.parse_config()
    lines = LineIndex(text)
    if root is None:
        err = parser.error(lines, source_name)
        logger.debug("Syntax error in %s: %s", source_name or "<string>", err)
        raise err
    return ParseTree(text, root, lines, source_name)
