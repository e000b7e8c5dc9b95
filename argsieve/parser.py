"""
Argsieve parser: classify raw command-line tokens into flags, parameters and positionals.

What this module provides
- Mode: independently combinable bits tuning how ambiguous options are resolved.
- Snapshot: the immutable outcome of one parse (flags, parameters, positionals).
- Parser: holds the registered parameter names and the latest snapshot, and
  answers lookups over it (flag presence, positional values, parameter values).

Terminology
- a command line is made of positional arguments (free standing values) and
  options (tokens starting with '-'). options are either
  • flags: presence-only (exist ? true : false)
  • parameters: a name followed by a value (or written inline as name=value)
- nothing has to be declared up front. registering a name only tells the parser
  that the name always takes a value, which settles otherwise ambiguous cases.

Classification in short
- a token is an option when it starts with '-' and is not a number ("-3", "-2.5"
  and "-1e10" are positionals).
- "--name=value" is a parameter unless Mode.NO_SPLIT_ON_EQUALSIGN is set.
- "-abc" expands to the flags a, b, c under Mode.SINGLE_DASH_IS_MULTIFLAG (when the
  last letter is a registered parameter it keeps taking a value).
- an option followed by a non-option becomes a parameter when its name is
  registered, or when Mode.PREFER_PARAM_FOR_UNREG_OPTION is set; otherwise it is a
  flag and the next token is classified on its own.
- an option that is the last token, or is followed by another option, is a flag.

Quick start
    from argsieve import Parser, Mode

    parser = Parser(params=["name"])
    parser.parse(["prog", "file.txt", "-v", "--name", "Alice", "-3"])

    parser["v"]                      # True
    parser[1]                        # "file.txt"
    parser(2).extract(int)           # -3
    parser("name").as_string()       # "Alice"
    parser("threads", 4).extract(int)  # 4 (default)

Threading
- parse() builds a fresh Snapshot and swaps it in at the very end. lookups are pure
  reads; they are safe from many threads as long as no parse()/registration runs
  concurrently on the same instance.
"""
import logging
import operator
import re
import sys
from bisect import bisect_left, bisect_right
from collections import Counter
from collections.abc import Iterable
from enum import IntFlag
from types import MappingProxyType
from typing import NamedTuple

from .faults import FaultCode, ModeConflictError, getdoc, trigger
from .utils import Unset, coalesce, mirror, trim
from .values import ParamRange, Value, format_default

logger = logging.getLogger(__name__)

_NUMBER = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)

_name_of = operator.itemgetter(0)


class Mode(IntFlag):
    """
    parse modes (bitwise OR them together).

    - PREFER_FLAG_FOR_UNREG_OPTION: an unregistered option followed by a value is
      a flag; the value becomes a positional. this is the default.
    - PREFER_PARAM_FOR_UNREG_OPTION: an unregistered option followed by a value is
      a parameter and consumes it. cannot be combined with the above.
    - NO_SPLIT_ON_EQUALSIGN: keep "name=value" tokens whole.
    - SINGLE_DASH_IS_MULTIFLAG: "-abc" means the flags a, b and c.
    """
    PREFER_FLAG_FOR_UNREG_OPTION  = 1 << 0
    PREFER_PARAM_FOR_UNREG_OPTION = 1 << 1
    NO_SPLIT_ON_EQUALSIGN         = 1 << 2
    SINGLE_DASH_IS_MULTIFLAG      = 1 << 3


def is_number(token, /):
    """
    return True when the whole token is a signed integer or decimal literal
    (an exponent is allowed). partial matches like "-1e10abc" are not numbers.
    """
    return _NUMBER.fullmatch(token) is not None


def is_option(token, /):
    """
    return True when the token starts with '-' and is not a number.
    """
    if is_number(token):
        return False
    return token.startswith("-")


def _resolve_mode(mode):
    if isinstance(mode, bool) or not isinstance(mode, int):
        raise TypeError("parse mode must be an integer or a Mode")
    mode = Mode(mode)
    if Mode.PREFER_FLAG_FOR_UNREG_OPTION in mode and Mode.PREFER_PARAM_FOR_UNREG_OPTION in mode:
        trigger(ModeConflictError(
            "mode %s asks to prefer both flags and parameters for unregistered options" % (mode.name or int(mode)),
            title="conflicting parse modes",
            code=FaultCode.MODE_CONFLICT,
            hint="keep only one of PREFER_FLAG_FOR_UNREG_OPTION or PREFER_PARAM_FOR_UNREG_OPTION",
            mode=mode,
            docs=getdoc(FaultCode.MODE_CONFLICT),
        ))
    return mode


def _sanitized(argv):
    """
    materialize the tokens as a list of strings, validating element types.
    """
    if isinstance(argv, str) or not isinstance(argv, Iterable):
        raise TypeError("parse() argument must be an iterable of strings")
    tokens = list(argv)
    for token in tokens:
        if not isinstance(token, str):
            raise TypeError("parse() argument must be an iterable of strings")
    return tokens


def _names(names, /):
    if isinstance(names, str) or not isinstance(names, Iterable):
        raise TypeError("names must be an iterable of strings")
    return [trim(name) for name in names]


class Snapshot(NamedTuple):
    """
    immutable outcome of a parse.

    - flags: read-only multiset (name → number of occurrences)
    - params: (name, value) pairs sorted by name, command-line order among equal names
    - positionals: values in command-line order
    """
    flags: MappingProxyType
    params: tuple
    positionals: tuple

    @classmethod
    def build(cls, flags, params, positionals):
        return cls(
            MappingProxyType(Counter(flags)),
            tuple(sorted(params, key=_name_of)),  # sorted() is stable
            tuple(positionals),
        )

    def bounds(self, name, /):
        """
        return the [lower, upper) run of pairs named `name`.
        """
        return bisect_left(self.params, name, key=_name_of), bisect_right(self.params, name, key=_name_of)

    def first(self, name, /):
        """
        return the first value given to `name`, or Unset.
        """
        lower, upper = self.bounds(name)
        return self.params[lower][1] if lower < upper else Unset

    def __rich_repr__(self):
        yield "flags", dict(self.flags)
        yield "params", list(self.params)
        yield "positionals", list(self.positionals)


Snapshot.EMPTY = Snapshot.build((), (), ())


class Parser:
    """
    Permissive command-line classifier with lookups over the latest parse.

    Construction
    - Parser(): empty parser, default mode PREFER_FLAG_FOR_UNREG_OPTION.
    - Parser(argv, mode): parse right away.
    - Parser(params=[...]): pre-register names that always take a value.
    - Parser.from_argv(...): classify sys.argv.

    The mode given to the constructor is the default for later parse() calls.

    Lookups
    - parser["v"] / parser[["v", "verbose"]]: flag presence (any alias).
    - parser[0]: positional text, "" when out of range.
    - parser(0), parser(0, default): positional as a Value.
    - parser("name"), parser(["n", "name"], default): first parameter value as a Value.
    - parser.params("name"): every value of a name (ParamRange); parser.params(): all pairs.
    - len(parser), iter(parser): positionals.

    Names given to lookups and registration are normalized like tokens are
    (leading dashes stripped), so parser["--verbose"] and parser["verbose"] agree.
    """

    registered = mirror("registered")

    def __init__(self, argv=Unset, /, mode=Mode.PREFER_FLAG_FOR_UNREG_OPTION, *, params=()):
        self._mode = _resolve_mode(mode)
        self._registered = set()
        self._snapshot = Snapshot.EMPTY
        self.add_params(params)
        if argv is not Unset:
            self.parse(argv)

    @classmethod
    def from_argv(cls, mode=Mode.PREFER_FLAG_FOR_UNREG_OPTION, *, params=()):
        """
        build a parser and classify the running program's sys.argv.
        """
        return cls(sys.argv, mode, params=params)

    @property
    def mode(self):
        return self._mode

    @property
    def snapshot(self):
        return self._snapshot

    @property
    def flags(self):
        return self._snapshot.flags

    @property
    def positionals(self):
        return self._snapshot.positionals

    # registration

    def add_param(self, name, /):
        """
        register one name as a parameter (a name that always takes a value).

        registering twice is a no-op; completed parses are not affected.
        """
        name = trim(name)
        if name not in self._registered:
            logger.debug("registering parameter %r", name)
        self._registered.add(name)

    def add_params(self, names, /):
        """
        register several names at once (a single string registers one name).
        """
        if isinstance(names, str):
            return self.add_param(names)
        for name in _names(names):
            self.add_param(name)

    def is_param(self, name, /):
        return trim(name) in self._registered

    # parsing

    def parse(self, argv, /, mode=Unset):
        """
        classify argv-like tokens and replace the previous snapshot.

        parameters
        - argv: Iterable[str]
          the tokens, in order (include or exclude the program name as you see fit).
        - mode: int | Mode (optional)
          overrides the constructor mode for this call only.

        returns
        - Snapshot: the new classification (also available through the lookups).

        raises
        - TypeError: argv is not an iterable of strings, or mode is not an integer.
        - ModeConflictError: both PREFER_* bits are set; nothing is parsed.
        """
        mode = _resolve_mode(coalesce(mode, self._mode))
        tokens = _sanitized(argv)

        flags = []
        params = []
        positionals = []

        index = 0
        while index < len(tokens):
            token = tokens[index]

            if not is_option(token):
                logger.debug("token %d %r is a positional", index, token)
                positionals.append(token)
                index += 1
                continue

            name = trim(token)

            if Mode.NO_SPLIT_ON_EQUALSIGN not in mode and "=" in name:
                key, _, value = name.partition("=")
                logger.debug("token %d %r is an inline parameter %r", index, token, key)
                params.append((key, value))
                index += 1
                continue

            # single dash cluster of unregistered letters: one flag per letter
            if (
                    len(token) - len(name) == 1 and
                    Mode.SINGLE_DASH_IS_MULTIFLAG in mode and
                    name not in self._registered
            ):
                keep = Unset
                if name[-1] in self._registered:
                    keep, name = name[-1], name[:-1]

                logger.debug("token %d %r expands to flags %r", index, token, list(name))
                flags.extend(name)

                if keep is Unset:
                    index += 1
                    continue
                name = keep

            # the next token is this option's value unless it is an option too
            if index == len(tokens) - 1 or is_option(tokens[index + 1]):
                logger.debug("token %d %r is a flag %r", index, token, name)
                flags.append(name)
                index += 1
                continue

            if name in self._registered or Mode.PREFER_PARAM_FOR_UNREG_OPTION in mode:
                logger.debug("token %d %r is a parameter %r taking %r", index, token, name, tokens[index + 1])
                params.append((name, tokens[index + 1]))
                index += 2
                continue

            logger.debug("token %d %r is a flag %r", index, token, name)
            flags.append(name)
            index += 1

        self._snapshot = Snapshot.build(flags, params, positionals)
        logger.debug(
            "parsed %d tokens: %d flags, %d parameters, %d positionals",
            len(tokens), len(flags), len(params), len(positionals)
        )
        return self._snapshot

    # lookups

    def params(self, name=Unset, /):
        """
        return every value given to `name` (or, without a name, every pair).

        the result is a ParamRange: a lazy, restartable view over the snapshot
        yielding (name, value) pairs; len() counts them, values() drops the names.
        """
        pairs = self._snapshot.params
        if name is Unset:
            return ParamRange(pairs)
        return ParamRange(pairs, *self._snapshot.bounds(trim(name)))

    def _lookup(self, key):
        if isinstance(key, bool):
            raise TypeError("lookup key must be a name, a list of names or an index")
        if isinstance(key, int):
            if 0 <= key < len(self._snapshot.positionals):
                return self._snapshot.positionals[key]
            return Unset
        if isinstance(key, str):
            return self._snapshot.first(trim(key))
        for name in _names(key):
            if (value := self._snapshot.first(name)) is not Unset:
                return value
        return Unset

    def __getitem__(self, key, /):
        """
        flag presence for a name or a list of aliases; positional text for an index.
        """
        if isinstance(key, bool):
            raise TypeError("lookup key must be a name, a list of names or an index")
        if isinstance(key, int):
            return coalesce(self._lookup(key), "")
        if isinstance(key, str):
            return trim(key) in self._snapshot.flags
        return any(name in self._snapshot.flags for name in _names(key))

    def __call__(self, key, default=Unset, /):
        """
        Value for a positional index, a parameter name, or a list of parameter aliases.

        when nothing is found, the formatted default is returned as a Value, or a
        failed Value when no default was given.
        """
        value = self._lookup(key)
        if value is not Unset:
            return Value(value)
        if default is not Unset:
            return Value(format_default(default))
        return Value.missing()

    def __len__(self):
        return len(self._snapshot.positionals)

    def __iter__(self):
        return iter(self._snapshot.positionals)

    def __repr__(self):
        return "Parser(%s)" % ", ".join("%s=%r" % pair for pair in self.__rich_repr__())

    def __rich_repr__(self):
        yield "mode", self._mode
        yield "registered", sorted(self._registered)
        yield "flags", dict(self._snapshot.flags)
        yield "params", list(self._snapshot.params)
        yield "positionals", list(self._snapshot.positionals)


__all__ = (
    "Mode",
    "Snapshot",
    "Parser",
    "is_number",
    "is_option",
)
