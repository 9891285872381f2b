"""Section model: the immutable, ordered result of parsing a printer config.

Collaborators (stepper/kinematics builders, heater/PID builders, MCU binder)
pull typed settings out of a ``ConfigDocument``::

    doc = parse(text)
    x = doc.section("stepper_x")
    x.as_string("step_pin")          # "PF0"
    x.as_number("rotation_distance") # 40.0
    doc.value("extruder", "pid_Kp")  # Number(22.2)

Sections and keys keep declaration order.  Lookups go through an index
built once at construction, so they stay O(1) without giving up order.
Everything here is read-only and safe to share across threads.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from gantry_config.cfg.errors import MissingKey, SectionNotFound, SourceSpan, TypeMismatch
from gantry_config.cfg.values import Value


@dataclass(frozen=True, slots=True)
class KeyValue:
    """One ``key: value`` line."""

    key: str
    value: Value
    span: SourceSpan | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Section:
    """A ``[type_name instance_name]`` block and its options.

    Parameters
    ----------
    type_name : str
        First identifier of the header, e.g. ``"stepper_x"``.
    instance_name : str | None
        Optional second identifier, e.g. ``"chamber"`` in
        ``[heater_generic chamber]``.
    items : tuple[KeyValue, ...]
        Options in declaration order.
    span : SourceSpan | None
        Location of the whole section in the source text.
    """

    type_name: str
    instance_name: str | None = None
    items: tuple[KeyValue, ...] = ()
    span: SourceSpan | None = field(default=None, compare=False)
    _index: dict[str, KeyValue] = field(
        init=False, repr=False, compare=False, default_factory=dict,
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))
        object.__setattr__(self, "_index", {kv.key: kv for kv in self.items})

    @property
    def name(self) -> str:
        """Header text without brackets, e.g. ``"heater_generic chamber"``."""
        if self.instance_name is None:
            return self.type_name
        return f"{self.type_name} {self.instance_name}"

    # -- Mapping-style access -----------------------------------------------

    def keys(self) -> tuple[str, ...]:
        return tuple(kv.key for kv in self.items)

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[KeyValue]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def value(self, key: str) -> Value:
        """Return the value stored under *key* or raise ``MissingKey``."""
        try:
            return self._index[key].value
        except KeyError:
            raise MissingKey(self.name, key) from None

    def get(self, key: str, default: Value | None = None) -> Value | None:
        kv = self._index.get(key)
        return default if kv is None else kv.value

    def span_of(self, key: str) -> SourceSpan | None:
        """Source location of the ``key: value`` line, for diagnostics."""
        if key not in self._index:
            raise MissingKey(self.name, key)
        return self._index[key].span

    # -- Typed accessors ----------------------------------------------------

    def _typed(self, key: str, getter: str):
        value = self.value(key)
        try:
            return getattr(value, getter)()
        except TypeMismatch as exc:
            raise TypeMismatch(exc.expected, exc.actual, self.name, key) from None

    def as_number(self, key: str) -> float:
        return self._typed(key, "as_number")

    def as_ratio(self, key: str) -> tuple[tuple[float, float], ...]:
        return self._typed(key, "as_ratio")

    def as_number_array(self, key: str) -> tuple[float, ...]:
        return self._typed(key, "as_number_array")

    def as_string(self, key: str) -> str:
        return self._typed(key, "as_string")

    def as_string_array(self, key: str) -> tuple[str, ...]:
        return self._typed(key, "as_string_array")


class ConfigDocument:
    """Ordered, immutable collection of ``Section`` objects.

    Parameters
    ----------
    sections : Iterable[Section]
        Sections in declaration order.  ``(type_name, instance_name)``
        pairs are expected to be unique; the parser guarantees it.
    source_name : str | None
        Where the text came from, if known.
    """

    __slots__ = ("_sections", "_index", "source_name")

    def __init__(
        self,
        sections: Iterable[Section] = (),
        source_name: str | None = None,
    ) -> None:
        self._sections: tuple[Section, ...] = tuple(sections)
        self._index: dict[tuple[str, str | None], Section] = {
            (s.type_name, s.instance_name): s for s in self._sections
        }
        self.source_name = source_name

    def sections(self) -> Iterator[Section]:
        """Iterate sections in declaration order (a fresh iterator per call)."""
        return iter(self._sections)

    def section(self, type_name: str, instance_name: str | None = None) -> Section:
        """Return the section ``[type_name instance_name]``.

        Raises
        ------
        SectionNotFound
            If no such section was declared.
        """
        try:
            return self._index[(type_name, instance_name)]
        except KeyError:
            raise SectionNotFound(type_name, instance_name) from None

    def sections_of_type(self, type_name: str) -> tuple[Section, ...]:
        """All sections sharing *type_name*, in declaration order."""
        return tuple(s for s in self._sections if s.type_name == type_name)

    def value(
        self,
        section: Section | str,
        key: str,
        instance_name: str | None = None,
    ) -> Value:
        """Return ``key`` from *section* (a ``Section`` or a type name).

        Raises
        ------
        SectionNotFound
            If *section* is a name that does not resolve.
        MissingKey
            If the section has no such key.
        """
        if isinstance(section, str):
            section = self.section(section, instance_name)
        return section.value(key)

    def __len__(self) -> int:
        return len(self._sections)

    def __iter__(self) -> Iterator[Section]:
        return self.sections()

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return (item, None) in self._index
        return item in self._index

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ConfigDocument):
            return NotImplemented
        return self._sections == other._sections

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        names = ", ".join(s.name for s in self._sections)
        return f"ConfigDocument([{names}])"
