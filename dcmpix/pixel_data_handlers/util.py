# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Utility functions used in the pixel data handlers: palette color lookup
and conversion of decoded pixel data to display layouts.
"""

import logging

import numpy as np

from dcmpix.errors import (
    PaletteRequiresSingleChannel, UnsupportedPaletteBitDepth,
    PaletteIndexOutOfRange, UnsupportedChannelLayout,
)
from dcmpix.image import Format, Palettes, RawImage


logger = logging.getLogger('dcmpix')


def map_to_palette(
    data: bytes,
    palettes: Palettes,
    channel_depth: int,
    samples_per_pixel: int = 1,
    index_byte_order: str = ">",
) -> bytes:
    """Return the palette color RGB values for the indices in `data`.

    Parameters
    ----------
    data : bytes
        The pixel data, one index per pixel.
    palettes : dcmpix.image.Palettes
        The red, green and blue lookup tables.
    channel_depth : int
        The number of bytes per index, 1 or 2.
    samples_per_pixel : int, optional
        The number of samples per pixel in `data`, must be 1.
    index_byte_order : str, optional
        The byte order of 2 byte indices, ``'>'`` (default) for big endian or
        ``'<'`` for little endian.

    Returns
    -------
    bytes
        The RGB pixel data, each sample as a 2 byte little endian value
        (i.e. ``R0 R1 G0 G1 B0 B1`` for each pixel). Any incomplete trailing
        index in `data` is ignored.

    Raises
    ------
    dcmpix.errors.PaletteRequiresSingleChannel
        If `samples_per_pixel` isn't 1.
    dcmpix.errors.UnsupportedPaletteBitDepth
        If `channel_depth` isn't 1 or 2.
    dcmpix.errors.PaletteIndexOutOfRange
        If an index has no entry in one of the lookup tables.
    """
    if samples_per_pixel != 1:
        raise PaletteRequiresSingleChannel(
            "Palette color lookup requires 1 sample per pixel, not "
            f"{samples_per_pixel}"
        )

    if channel_depth not in (1, 2):
        raise UnsupportedPaletteBitDepth(
            f"Unsupported bit depth: {channel_depth} (1 and 2 supported)"
        )

    usable = len(data) - len(data) % channel_depth
    indices = np.frombuffer(
        data[:usable], dtype=f"{index_byte_order}u{channel_depth}"
    )

    luts = [np.asarray(lut, dtype="<u2") for lut in palettes]
    nr_entries = min(len(lut) for lut in luts)
    if indices.size and indices.max() >= nr_entries:
        raise PaletteIndexOutOfRange(
            f"The pixel value {indices.max()} has no entry in the palette "
            f"color lookup tables ({nr_entries} entries)"
        )

    out = np.empty((indices.size, 3), dtype="<u2")
    for ii, lut in enumerate(luts):
        out[:, ii] = lut[indices]

    return out.tobytes()


def apply_palette(
    image: RawImage, palettes: Palettes, index_byte_order: str = ">"
) -> RawImage:
    """Return a new :class:`~dcmpix.image.RawImage` with the palette color
    lookup tables applied to `image`.

    The returned image has 3 channels of 2 bytes per sample, see
    :func:`map_to_palette`.
    """
    fmt = image.format
    data = map_to_palette(
        image.data,
        palettes,
        fmt.channel_depth,
        fmt.channels,
        index_byte_order,
    )

    return RawImage(fmt._replace(channels=3, channel_depth=2), data)


def to_8bit(image: RawImage) -> RawImage:
    """Return `image` with 1 byte per sample.

    2 byte samples are read as little endian and truncated to their high
    byte (i.e. ``value >> 8``). 1 byte samples are copied.

    Raises
    ------
    dcmpix.errors.UnsupportedChannelLayout
        If `image` has a channel depth other than 1 or 2 bytes.
    """
    fmt = image.format
    if fmt.channel_depth == 1:
        return RawImage(fmt, bytes(image.data))

    if fmt.channel_depth != 2:
        raise UnsupportedChannelLayout(
            f"Unable to convert {fmt.channels} channels of depth "
            f"{fmt.channel_depth} bytes to 8-bit"
        )

    usable = len(image.data) - len(image.data) % 2
    arr = np.frombuffer(image.data[:usable], dtype="<u2")
    arr = np.right_shift(arr, 8).astype(np.uint8)

    return RawImage(fmt._replace(channel_depth=1), arr.tobytes())


def convert_to_bgra(image: RawImage) -> RawImage:
    """Return `image` in the 8-bit BGRA layout used by display surfaces.

    * 3 channel pixels ``(c0, c1, c2)`` become ``(c2, c1, c0, 255)``
    * 1 channel pixels ``(v)`` become ``(v, v, v, 255)``

    2 byte samples are first reduced to 1 byte with :func:`to_8bit`.

    Returns
    -------
    dcmpix.image.RawImage
        The converted image, with 4 channels of 1 byte per sample.

    Raises
    ------
    dcmpix.errors.UnsupportedChannelLayout
        If `image` doesn't have 1 or 3 channels of 1 or 2 bytes.
    """
    fmt = image.format
    if fmt.channels not in (1, 3):
        raise UnsupportedChannelLayout(
            f"BGRA conversion: unsupported format: {fmt.channels} channels "
            f"of depth {fmt.channel_depth} bytes"
        )

    arr = np.frombuffer(to_8bit(image).data, dtype=np.uint8)
    if fmt.channels == 3:
        arr = arr[:arr.size - arr.size % 3].reshape(-1, 3)[:, ::-1]
    else:
        arr = arr.reshape(-1, 1)

    out = np.empty((arr.shape[0], 4), dtype=np.uint8)
    out[:, :3] = arr
    out[:, 3] = 255

    return RawImage(Format(fmt.width, fmt.height, 4, 1), out.tobytes())
