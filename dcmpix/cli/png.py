# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix command line interface program for `dcmpix png`"""

from dcmpix.cli.main import dataset_parser
from dcmpix.decoding import get_image
from dcmpix.export import write_png


def add_subparser(subparsers):
    subparser = subparsers.add_parser(
        "png", description="Write the pixel data of a DICOM file to a PNG file"
    )
    subparser.add_argument(
        "dataset", metavar="INPUT", help="DICOM file", type=dataset_parser
    )
    subparser.add_argument("output", metavar="OUTPUT", help="PNG file")

    subparser.set_defaults(func=do_command)


def do_command(args):
    image = get_image(args.dataset)
    write_png(image, args.output)
    fmt = image.format
    print(
        f"Wrote a {fmt.width}x{fmt.height} image with {fmt.channels} "
        f"channel(s) to '{args.output}'"
    )
