# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix package -- decode the pixel data of DICOM files.
   See Quick Start below.

-----------
Quick Start
-----------

1. Decode the pixel data of a file and write it as a PNG::

    from pydicom import dcmread
    from dcmpix import get_image, write_png
    image = get_image(dcmread("file1.dcm"))
    write_png(image, "file1.png")

2. Get an 8-bit BGRA buffer for display::

    from dcmpix import convert_to_bgra
    bgra = convert_to_bgra(image)
    width, height = bgra.format.width, bgra.format.height

3. Turn on debug logging with ``dcmpix.config.debug()`` or by setting the
   ``DCMPIX_DEBUG`` environment variable.

"""

from dcmpix.attributes import get_encoded_image
from dcmpix.decoding import (
    decode_image, decode_pixel_data, get_display_buffer, get_image
)
from dcmpix.export import write_png
from dcmpix.image import (
    EncodedImage, Encoding, Format, Palettes, PhotometricInterpretation,
    RawImage,
)
from dcmpix.pixel_data_handlers.util import convert_to_bgra, map_to_palette

from ._version import __version__, __version_info__

__all__ = [
    "EncodedImage",
    "Encoding",
    "Format",
    "Palettes",
    "PhotometricInterpretation",
    "RawImage",
    "convert_to_bgra",
    "decode_image",
    "decode_pixel_data",
    "get_display_buffer",
    "get_encoded_image",
    "get_image",
    "map_to_palette",
    "write_png",
    "__version__",
    "__version_info__",
]
