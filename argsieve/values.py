r"""
Argsieve retrieved values: fallible conversion and parameter ranges.

Overview
- Value
  • Holds the raw text of one retrieved argument (a positional, a parameter value,
    or a formatted default) plus a sticky failed state.
  • extract(type, default) attempts a conversion; on malformed text the value
    enters the failed state and stays there, and the default is handed back.
  • bool(value) tells whether the value is usable, without ever raising.

- ParamRange
  • Read-only, lazily iterated view over a contiguous run of the parser's sorted
    (name, value) pairs: either every pair of one name, or the whole table.
  • Finite and restartable (it is a Sequence), supports len() and indexing, and
    never copies the underlying storage.

- format_default(object)
  • Turn a caller supplied default into the text a Value carries.
    floats keep full round-trip precision (repr), bools become "1"/"0".

Conversions
- str is the identity; bool accepts 1/0/true/false (case-insensitive).
- any other type is treated as a converter callable: type(text). a ValueError or
  TypeError raised by it marks the value as failed.

Quick example
    >>> port = Value("8080")
    >>> port.extract(int)
    8080
    >>> broken = Value("80x")
    >>> broken.extract(int, 80), bool(broken)
    (80, False)
    >>> broken.extract(str) is None  # failed values stay failed
    True
"""
import operator
from collections.abc import Sequence

from rich.text import Text

from .faults import ConversionWarning, FaultCode, getdoc, trigger
from .utils import Unset


def _to_bool(text, /):
    match text.strip().lower():
        case "1" | "true":
            return True
        case "0" | "false":
            return False
    raise ValueError("invalid literal for bool: %r" % text)


_CONVERTERS = {
    str: lambda text: text,
    bool: _to_bool,
}


def format_default(object, /):
    """
    format a default value into the text carried by a Value.

    rules
    - Value  → its raw text (even when failed)
    - str    → unchanged
    - bool   → "1" / "0"
    - float  → repr(), the shortest text that round-trips to the same float
    - other  → str()
    """
    if isinstance(object, Value):
        return object.as_string()
    if isinstance(object, str):
        return object
    if isinstance(object, bool):
        return "1" if object else "0"
    if isinstance(object, float):
        return repr(object)
    return str(object)


class Value:
    """
    A single retrieved argument with fallible typed conversion.

    A Value is either usable (it wraps real text from the command line or a
    formatted default) or failed (nothing was found, or a conversion choked on
    the text). The failed state is queried with bool(), and it is sticky: once a
    conversion fails, every later extract() returns its default.

    Values are cheap and independent; the parser hands out a new one on every
    lookup, so one failing conversion never leaks into another lookup.
    """
    __slots__ = ("_text", "_failed", "_missing")

    def __init__(self, text="", /):
        if not isinstance(text, str):
            raise TypeError("Value() argument must be a string")
        self._text = text
        self._failed = False
        self._missing = False

    @classmethod
    def missing(cls):
        """
        build a failed Value standing for an argument that was not found.
        """
        self = cls()
        self._failed = True
        self._missing = True
        return self

    @property
    def failed(self):
        return self._failed

    def as_string(self):
        """
        return the raw text, whatever the state ("" for a missing value).
        """
        return self._text

    def extract(self, type=str, default=None, /, *, strict=False):
        """
        attempt to convert the text to `type`.

        parameters
        - type: str | bool | Callable[[str], T]
          target type, or any converter taking the raw text.
        - default: any
          returned when the value is failed, or becomes failed now.
        - strict: bool
          emit a ConversionWarning when the conversion cannot happen.

        returns
        - the converted object, or `default`.

        notes
        - a failing converter (ValueError/TypeError) flips this value into the
          failed state for good; other exceptions propagate untouched.
        """
        converter = _CONVERTERS.get(type, type)
        if not callable(converter):
            raise TypeError("extract() argument must be a type or a callable")

        if self._failed:
            if strict:
                self._warn(type, FaultCode.MISSING_VALUE if self._missing else FaultCode.UNCONVERTIBLE_VALUE)
            return default

        try:
            return converter(self._text)
        except (ValueError, TypeError):
            self._failed = True
            if strict:
                self._warn(type, FaultCode.UNCONVERTIBLE_VALUE)
            return default

    def _warn(self, type, code):
        target = getattr(type, "__name__", repr(type))
        if code is FaultCode.MISSING_VALUE:
            message = "no value was found to convert to %s" % target
            hint = "pass the argument on the command line or supply a default"
        else:
            message = "cannot convert %r to %s" % (self._text, target)
            hint = "check the spelling of the value (expected a %s)" % target
        trigger(ConversionWarning(
            message,
            title="unconvertible value" if code is FaultCode.UNCONVERTIBLE_VALUE else "missing value",
            code=code,
            hint=hint,
            text=self._text,
            type=type,
            docs=getdoc(code),
        ))

    def __bool__(self):
        return not self._failed

    def __str__(self):
        return self._text

    def __int__(self):
        if self._failed:
            raise ValueError("cannot convert a failed value to int")
        return int(self._text)

    def __float__(self):
        if self._failed:
            raise ValueError("cannot convert a failed value to float")
        return float(self._text)

    def __eq__(self, other, /):
        if isinstance(other, Value):
            return (self._text, self._failed) == (other._text, other._failed)
        if isinstance(other, str):
            return not self._failed and self._text == other
        return NotImplemented

    __hash__ = None

    def __repr__(self):
        if self._missing:
            return "Value(<missing>)"
        if self._failed:
            return "Value(%r, failed=True)" % self._text
        return "Value(%r)" % self._text

    def __rich__(self):
        if self._failed:
            return Text(repr(self), style="dim")
        return Text.assemble(("Value(", "yellow"), (repr(self._text), "green"), (")", "yellow"))

    def __rich_repr__(self):
        yield "text", self._text
        yield "failed", self._failed, False


class ParamRange(Sequence):
    """
    Read-only view over a run of (name, value) pairs of a parse snapshot.

    The view keeps a reference to the snapshot's sorted pair table and the
    [lower, upper) bounds of the run; nothing is copied. Iterating yields
    (name, value) pairs in table order (for one name: the order the values were
    given on the command line). values() yields the bare value strings.
    """
    __slots__ = ("_pairs", "_lower", "_upper")

    def __init__(self, pairs, lower=0, upper=Unset, /):
        if not isinstance(pairs, tuple):
            raise TypeError("ParamRange() argument must be a tuple of pairs")
        upper = len(pairs) if upper is Unset else upper
        if not 0 <= lower <= upper <= len(pairs):
            raise ValueError("ParamRange() bounds are out of range")
        self._pairs = pairs
        self._lower = lower
        self._upper = upper

    def __len__(self):
        return self._upper - self._lower

    def __getitem__(self, index, /):
        if isinstance(index, slice):
            return tuple(self._pairs[self._lower + position] for position in range(*index.indices(len(self))))
        index = operator.index(index)
        if index < 0:
            index += len(self)
        if not 0 <= index < len(self):
            raise IndexError("param range index out of range")
        return self._pairs[self._lower + index]

    def __iter__(self):
        for position in range(self._lower, self._upper):
            yield self._pairs[position]

    def values(self):
        """
        iterate the value strings only, in range order.
        """
        for position in range(self._lower, self._upper):
            yield self._pairs[position][1]

    def names(self):
        """
        iterate the names of the range, in order (duplicates included).
        """
        for position in range(self._lower, self._upper):
            yield self._pairs[position][0]

    def __repr__(self):
        return "ParamRange(%r)" % (list(self),)

    def __rich_repr__(self):
        yield list(self)


__all__ = (
    "Value",
    "ParamRange",
    "format_default",
)
