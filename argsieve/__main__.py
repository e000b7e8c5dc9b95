"""
Inspect how argsieve classifies a command line.

usage
    python -m argsieve [--register=NAME ...] [--prefer-param] [--prefer-flag]
                       [--no-split] [--multiflag] [--fancy] -- TOKEN ...

everything after the first "--" is classified and shown as a table of flags,
parameters and positionals. the tool's own options are read with argsieve itself.
"""
import logging
import sys

from rich.console import Console
from rich.pretty import Pretty
from rich.table import Table

from .faults import ModeConflictError, trigger
from .parser import Mode, Parser

console = Console()


def _options(argv):
    options = Parser(argv, Mode.PREFER_FLAG_FOR_UNREG_OPTION, params=["register"])

    mode = Mode(0)
    if options["prefer-flag"]:
        mode |= Mode.PREFER_FLAG_FOR_UNREG_OPTION
    if options["prefer-param"]:
        mode |= Mode.PREFER_PARAM_FOR_UNREG_OPTION
    if options["no-split"]:
        mode |= Mode.NO_SPLIT_ON_EQUALSIGN
    if options["multiflag"]:
        mode |= Mode.SINGLE_DASH_IS_MULTIFLAG
    if not mode & (Mode.PREFER_FLAG_FOR_UNREG_OPTION | Mode.PREFER_PARAM_FOR_UNREG_OPTION):
        mode |= Mode.PREFER_FLAG_FOR_UNREG_OPTION

    return mode, list(options.params("register").values()), options[["fancy", "f"]], options[["debug", "d"]]


def _table(parser):
    table = Table(title="classification", title_justify="left")
    table.add_column("kind", style="bold")
    table.add_column("name", style="cyan")
    table.add_column("value", style="green")

    for name, count in sorted(parser.flags.items()):
        table.add_row("flag", name, "×%d" % count if count > 1 else "")
    for name, value in parser.params():
        table.add_row("parameter", name, value)
    for index, value in enumerate(parser):
        table.add_row("positional", str(index), value)
    return table


def main(argv=None):
    argv = sys.argv[1:] if argv is None else list(argv)
    try:
        split = argv.index("--")
    except ValueError:
        head, tokens = argv, []
    else:
        head, tokens = argv[:split], argv[split + 1:]

    mode, registered, fancy, debug = _options(head)
    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    try:
        parser = Parser(tokens, mode, params=registered)
    except ModeConflictError as error:
        trigger(error, shell=True, fancy=fancy)
        raise  # unreachable: shell mode exits

    if fancy:
        console.print(Pretty(parser))
    console.print(_table(parser))
    return 0


if __name__ == "__main__":
    sys.exit(main())
