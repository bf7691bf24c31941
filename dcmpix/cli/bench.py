# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix command line interface program for `dcmpix bench`"""

import argparse
from pathlib import Path

from dcmpix.benchmark import benchmark_directory, format_result


def directory(path: str) -> Path:
    p = Path(path)
    if not p.is_dir():
        raise argparse.ArgumentTypeError(f"'{path}' is not a directory")

    return p


def positive_int(value: str) -> int:
    try:
        nr = int(value)
    except ValueError:
        nr = 0

    if nr < 1:
        raise argparse.ArgumentTypeError(
            f"'{value}' is not a positive integer"
        )

    return nr


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "bench",
        description=(
            "Time reading and decoding of the DICOM files laid out as "
            "DIRECTORY/<category>/<file>"
        ),
    )
    subparser.add_argument(
        "directory", metavar="DIRECTORY", help="Root directory", type=directory
    )
    subparser.add_argument(
        "-w",
        "--workers",
        help="Number of files to process in parallel",
        type=positive_int,
        default=1,
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    for category, results in benchmark_directory(args.directory, args.workers):
        print(f"\n{category}")
        for result in results:
            print(format_result(result))
