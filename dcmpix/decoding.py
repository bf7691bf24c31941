# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Decode the *Pixel Data* of a dataset.

Overview
--------
get_encoded_image(ds) -> EncodedImage
    Extract the pixel data and its description from the dataset.
decode_pixel_data(encoded) -> RawImage
    Decode the pixel data using the first suitable handler in
    :attr:`dcmpix.config.pixel_data_handlers`.
decode_image(encoded) -> RawImage
    As above, then apply the palette color lookup tables (if any).
convert_to_bgra(image) -> RawImage
    Convert to the 8-bit BGRA layout used by displays.
"""

import logging
from typing import TYPE_CHECKING

from dcmpix import config
from dcmpix.attributes import get_encoded_image
from dcmpix.errors import ExternalDecodeError, UnsupportedTransferSyntax
from dcmpix.image import EncodedImage, RawImage
from dcmpix.pixel_data_handlers.util import apply_palette, convert_to_bgra

if TYPE_CHECKING:  # pragma: no cover
    from pydicom.dataset import Dataset


logger = logging.getLogger('dcmpix')


def decode_pixel_data(encoded: EncodedImage) -> RawImage:
    """Return the decoded *Pixel Data* in `encoded`.

    The first handler in :attr:`dcmpix.config.pixel_data_handlers` that
    supports the encoding and has its dependencies met is used. If that
    handler fails the exception is propagated, no other handlers are tried.

    Parameters
    ----------
    encoded : dcmpix.image.EncodedImage
        The encoded pixel data.

    Returns
    -------
    dcmpix.image.RawImage
        The decoded pixel data, before any palette color lookup. Multi-byte
        samples are little endian.

    Raises
    ------
    dcmpix.errors.UnsupportedTransferSyntax
        If no handler supports the encoding.
    dcmpix.errors.ExternalDecodeError
        If the handlers that support the encoding are missing dependencies.
    """
    possible_handlers = [
        hh for hh in config.pixel_data_handlers
        if hh.supports_encoding(encoded.encoding)
    ]

    # No handlers support the encoding
    if not possible_handlers:
        raise UnsupportedTransferSyntax(encoded.encoding.name)

    # Handlers that both support the encoding and have their dependencies met
    available_handlers = [hh for hh in possible_handlers if hh.is_available()]

    # There are handlers that support the encoding but none of them
    #   can be used as missing dependencies
    if not available_handlers:
        pkg_msg = [
            f"{hh.HANDLER_NAME} (req. {', '.join(hh.missing_dependencies())})"
            for hh in possible_handlers
        ]
        raise ExternalDecodeError(
            "The following handlers are available to decode the pixel "
            "data however they are missing required dependencies: "
            + ", ".join(pkg_msg)
        )

    handler = available_handlers[0]
    logger.debug(
        f"Decoding {encoded.encoding.name} pixel data using the "
        f"'{handler.HANDLER_NAME}' handler"
    )

    return handler.get_pixeldata(encoded)


def decode_image(encoded: EncodedImage) -> RawImage:
    """Return the decoded *Pixel Data* in `encoded` with any palette color
    lookup tables applied.

    Decoding doesn't modify `encoded`, so decoding the same
    :class:`~dcmpix.image.EncodedImage` again returns an equal
    :class:`~dcmpix.image.RawImage`.

    Returns
    -------
    dcmpix.image.RawImage
        The decoded pixel data. Palette color images are returned as 3
        channels of 2 byte little endian samples.
    """
    image = decode_pixel_data(encoded)
    if encoded.palettes is not None:
        # Decoded indices follow the handlers' byte order
        image = apply_palette(
            image, encoded.palettes, config.settings.sample_byte_order
        )

    return image


def get_image(ds: "Dataset") -> RawImage:
    """Return the decoded *Pixel Data* of `ds`.

    Parameters
    ----------
    ds : pydicom.dataset.Dataset
        The dataset containing the pixel data, with file meta information.

    Returns
    -------
    dcmpix.image.RawImage
        The decoded pixel data, see :func:`decode_image`.

    Raises
    ------
    dcmpix.errors.PixelDataError
        If the pixel data can't be extracted or decoded.
    """
    return decode_image(get_encoded_image(ds))


def get_display_buffer(ds: "Dataset") -> tuple[int, int, bytes]:
    """Return the *Pixel Data* of `ds` ready to be shown on screen.

    Returns
    -------
    tuple[int, int, bytes]
        The width, height and 8-bit BGRA pixel data.
    """
    image = convert_to_bgra(get_image(ds))

    return image.format.width, image.format.height, image.data
