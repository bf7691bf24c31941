# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Write decoded pixel data to lossless image files using
`pillow <https://python-pillow.org/>`_.
"""

import logging
import os

from PIL import Image

from dcmpix.errors import UnsupportedImageFormat
from dcmpix.image import RawImage
from dcmpix.misc import warn_and_log
from dcmpix.pixel_data_handlers.util import to_8bit


logger = logging.getLogger('dcmpix')


# (channels, bytes per sample) -> (Pillow mode, raw decoder mode)
PNG_MODES = {
    (1, 1): ("L", "L"),
    (1, 2): ("I;16", "I;16"),
    (3, 1): ("RGB", "RGB"),
}


def to_pil_image(image: RawImage) -> "Image.Image":
    """Return `image` as a :class:`PIL.Image.Image`.

    1 and 3 channel images with 1 or 2 bytes per sample are supported. Pillow
    has no 16-bit RGB mode so 3 channel images with 2 bytes per sample are
    reduced to 8-bit with :func:`~dcmpix.pixel_data_handlers.util.to_8bit`.

    Raises
    ------
    dcmpix.errors.UnsupportedImageFormat
        If the channels or channel depth of `image` aren't supported.
    """
    fmt = image.format
    if fmt.channels not in (1, 3) or fmt.channel_depth not in (1, 2):
        raise UnsupportedImageFormat(
            f"Unable to write an image with {fmt.channels} channels of depth "
            f"{fmt.channel_depth} bytes, only 1 or 3 channels of depth 1 or 2 "
            "bytes are supported"
        )

    if (fmt.channels, fmt.channel_depth) == (3, 2):
        warn_and_log(
            "16-bit RGB images are not supported by Pillow, the image will be "
            "written as 8-bit RGB"
        )
        image = to_8bit(image)
        fmt = image.format

    mode, rawmode = PNG_MODES[(fmt.channels, fmt.channel_depth)]
    if len(image.data) < fmt.nr_bytes:
        raise UnsupportedImageFormat(
            f"The image data is too short for a {fmt.width}x{fmt.height} "
            f"'{mode}' image ({len(image.data)} vs. {fmt.nr_bytes} bytes)"
        )

    return Image.frombytes(
        mode,
        (fmt.width, fmt.height),
        image.data[:fmt.nr_bytes],
        "raw",
        rawmode,
    )


def write_png(image: RawImage, path: str | os.PathLike) -> None:
    """Write `image` to `path` as a PNG file.

    The image format is checked before the file is created so nothing is
    written for unsupported images.

    Parameters
    ----------
    image : dcmpix.image.RawImage
        The decoded pixel data, with 1 or 3 channels of 1 or 2 bytes per
        sample. 2 byte samples must be little endian.
    path : str or PathLike
        The path of the file to write.
    """
    pil_image = to_pil_image(image)
    pil_image.save(path, format="PNG")
    logger.debug(f"Wrote a {pil_image.mode} image to '{os.fspath(path)}'")
