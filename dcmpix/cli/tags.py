# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix command line interface program for `dcmpix tags`"""

from dcmpix.cli.main import dataset_parser
from dcmpix.table import format_dicom_table, get_dicom_table


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "tags", description="Display the elements of a DICOM file as a table"
    )
    subparser.add_argument(
        "dataset", metavar="FILE", help="DICOM file", type=dataset_parser
    )
    subparser.add_argument(
        "-m",
        "--file-meta",
        help="Include the file meta information",
        action="store_true",
    )

    subparser.set_defaults(func=do_command)


def do_command(args):
    ds = args.dataset
    table = []
    if args.file_meta and getattr(ds, "file_meta", None) is not None:
        table.extend(get_dicom_table(ds.file_meta))

    table.extend(get_dicom_table(ds))
    print(format_dicom_table(table))
