"""Typed configuration values.

Every option in a printer config resolves to exactly one of five immutable,
slotted dataclasses.  The variant is fixed when the value is built; reading
it as another shape raises ``TypeMismatch`` instead of converting.

    ========================  ==================================
    Surface text              Variant
    ========================  ==================================
    ``500``, ``-1.5e-3``      ``Number(500.0)``
    ``80:16, 3:1``            ``Ratio(((80.0, 16.0), (3.0, 1.0)))``
    ``1, 2`` (or indented)    ``NumberArray((1.0, 2.0))``
    ``PF0``, ``!PD7``         ``String("PF0")``
    ``a, b``                  ``StringArray(("a", "b"))``
    ========================  ==================================

Pin specifiers keep their ``!`` / ``^`` prefixes untouched.
"""

from __future__ import annotations

import math
from abc import ABC
from dataclasses import dataclass

from gantry_config.cfg.errors import TypeMismatch


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Value(ABC):
    """Base class for all resolved values.

    The ``as_*`` accessors return the payload of the matching variant and
    raise ``TypeMismatch`` on every other one.
    """

    @property
    def kind(self) -> str:
        """Variant name, e.g. ``"Number"``."""
        return type(self).__name__

    def _mismatch(self, expected: str) -> TypeMismatch:
        return TypeMismatch(expected, self.kind)

    def as_number(self) -> float:
        raise self._mismatch("Number")

    def as_ratio(self) -> tuple[tuple[float, float], ...]:
        raise self._mismatch("Ratio")

    def as_number_array(self) -> tuple[float, ...]:
        raise self._mismatch("NumberArray")

    def as_string(self) -> str:
        raise self._mismatch("String")

    def as_string_array(self) -> tuple[str, ...]:
        raise self._mismatch("StringArray")


# ---------------------------------------------------------------------------
# Variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Number(Value):
    """A single 64-bit float."""

    value: float

    def as_number(self) -> float:
        return self.value

    def __str__(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True, slots=True)
class Ratio(Value):
    """Ordered ``numerator:denominator`` pairs, e.g. a gear train.

    Parameters
    ----------
    pairs : tuple[tuple[float, float], ...]
        Pairs in the order written.  Never empty when produced by the
        parser.
    """

    pairs: tuple[tuple[float, float], ...]

    @property
    def value(self) -> float:
        """Product of ``numerator / denominator`` over all pairs.

        ``80:16, 3:1`` reduces to ``15.0``.  A zero denominator yields
        ``inf`` (or ``nan`` for ``0:0``) rather than raising.
        """
        result = 1.0
        for num, den in self.pairs:
            if den == 0:
                quotient = math.nan if num == 0 else math.copysign(math.inf, num)
            else:
                quotient = num / den
            result *= quotient
        return result

    def as_ratio(self) -> tuple[tuple[float, float], ...]:
        return self.pairs

    def __str__(self) -> str:
        return ", ".join(
            f"{format_number(num)}:{format_number(den)}" for num, den in self.pairs
        )


@dataclass(frozen=True, slots=True)
class NumberArray(Value):
    """Flat ordered sequence of floats."""

    values: tuple[float, ...]

    def as_number_array(self) -> tuple[float, ...]:
        return self.values

    def __str__(self) -> str:
        return ", ".join(format_number(v) for v in self.values)


@dataclass(frozen=True, slots=True)
class String(Value):
    """Raw text; multiline strings are joined with ``"\\n"``."""

    value: str

    def as_string(self) -> str:
        return self.value

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class StringArray(Value):
    """Ordered sequence of raw text elements."""

    values: tuple[str, ...]

    def as_string_array(self) -> tuple[str, ...]:
        return self.values

    def __str__(self) -> str:
        return ", ".join(self.values)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def format_number(v: float) -> str:
    """Render a float in config surface syntax.

    Integral values print without a fractional part (``16`` rather than
    ``16.0``); everything else uses ``repr`` so the text parses back to the
    identical float.
    """
    if math.isfinite(v) and v == int(v) and abs(v) < 1e16:
        return str(int(v))
    return repr(v)
