# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix command line interface program

Each subcommand is a module within dcmpix.cli, which
defines an add_subparser(subparsers) function to set argparse
attributes, and calls set_defaults(func=callback_function)

"""

import argparse
from importlib.metadata import entry_points
import logging
import sys
from collections.abc import Callable

from pydicom import dcmread
from pydicom.dataset import Dataset
from pydicom.errors import InvalidDicomError

from dcmpix import config
from dcmpix.errors import PixelDataError


logger = logging.getLogger('dcmpix')

subparsers: argparse._SubParsersAction | None = None


def dataset_parser(filename: str) -> Dataset:
    """Return the dataset read from `filename`.

    Used as an argparse 'type' so that unreadable files are reported as
    argument errors.

    Raises
    ------
    argparse.ArgumentTypeError
        If the file doesn't exist or isn't a DICOM file.
    """
    try:
        return dcmread(filename)
    except FileNotFoundError:
        raise argparse.ArgumentTypeError(f"File '{filename}' not found")
    except (InvalidDicomError, OSError) as exc:
        raise argparse.ArgumentTypeError(
            f"Error reading '{filename}': {exc}"
        )


def help_command(args: argparse.Namespace) -> None:
    if subparsers is None:
        print("No subcommands are available")
        return

    subcommands: list[str] = list(subparsers.choices.keys())
    if args.subcommand and args.subcommand in subcommands:
        subparsers.choices[args.subcommand].print_help()
    else:
        print("Use dcmpix help [subcommand] to show help for a subcommand")
        subcommands.remove("help")
        print(f"Available subcommands: {', '.join(subcommands)}")


SubCommandType = dict[str, Callable[[argparse._SubParsersAction], None]]


def get_subcommand_entry_points() -> SubCommandType:
    subcommands = {}
    for entry_point in entry_points(group="dcmpix_subcommands"):
        subcommands[entry_point.name] = entry_point.load()

    return subcommands


def main(args: list[str] | None = None) -> None:
    """Entry point for 'dcmpix' command line interface

    Parameters
    ----------
    args : List[str], optional
        Command-line arguments to parse.  If ``None``, then :attr:`sys.argv`
        is used.
    """
    global subparsers

    py_version = sys.version.split()[0]

    parser = argparse.ArgumentParser(
        prog="dcmpix",
        description=f"dcmpix command line utilities (Python {py_version})",
    )
    parser.add_argument(
        "-v", "--verbose", help="Show debug output", action="store_true"
    )
    subparsers = parser.add_subparsers(help="subcommand help")

    help_parser = subparsers.add_parser(
        "help", help="display help for subcommands"
    )
    help_parser.add_argument(
        "subcommand", nargs="?", help="Subcommand to show help for"
    )
    help_parser.set_defaults(func=help_command)

    # Get subcommands to register themselves as a subparser
    subcommands = get_subcommand_entry_points()
    for subcommand in subcommands.values():
        subcommand(subparsers)

    ns = parser.parse_args(args)
    if ns.verbose:
        config.debug(True)

    if not hasattr(ns, "func"):
        parser.print_help()
        return

    try:
        ns.func(ns)
    except PixelDataError as exc:
        logger.debug("The subcommand failed", exc_info=exc)
        print(f"dcmpix: error: {exc}", file=sys.stderr)
        sys.exit(1)
