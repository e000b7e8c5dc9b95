from rich.pretty import pprint

from argsieve import *


parser = Parser(params=["name", "o"])


if __name__ == '__main__':
    parser.parse(["prog", "file.txt", "-v", "--name", "Alice", "-3", "--level=2", "-xo", "out.txt"], Mode.SINGLE_DASH_IS_MULTIFLAG)
    pprint(parser)
    pprint(parser("level", 1).extract(int))
