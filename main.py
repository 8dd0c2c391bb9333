import logging
import sys

from rich.logging import RichHandler
from rich.pretty import pprint

from optargs import *

__prog__ = "optargs-demo"

logging.basicConfig(level=logging.INFO, format="%(message)s", datefmt="[%X]", handlers=[RichHandler()])


def build(argv):
    parser = getopt_long(argv, "vo:c::W;", [
        ("verbose", ArgType.NONE),
        ("output", ArgType.REQUIRED),
        ("color", ArgType.OPTIONAL),
    ])
    remote = Parser(ParserConfig(), {"f": Flag("f")}, [("url", ArgType.REQUIRED)])
    parser.add_command("remote", remote)
    parser.add_alias("r", "remote")
    return parser


if __name__ == '__main__':
    parser = build(sys.argv[1:])
    for option, fault in parser:
        if fault is not None:
            report(fault)
            sys.exit(2)
        pprint(option)
    pprint(parser.dispatched or parser)
