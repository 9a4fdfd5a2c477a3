from rich.pretty import pprint

from argverb import *


@verb(
    "copy",
    Parameter("--source", descr="file to read", required=True, value_required=True),
    Parameter("--target", descr="file to write", value_required=True),
    Parameter("--force", descr="overwrite the target"),
    descr="copy a file",
)
def copy(parameters):
    pprint(parameters)


@option("--verbose", descr="print more")
def verbose(_):
    pprint("verbose")


if __name__ == '__main__':
    parse([copy, verbose], shell=True)
