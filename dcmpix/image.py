# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Containers for encoded and decoded pixel data.

Overview
--------
EncodedImage
    The still encoded (7FE0,0010) *Pixel Data* of a single frame together with
    the shape it should have once decoded, how it is encoded and its color
    model. Created by :func:`~dcmpix.attributes.get_encoded_image`.
RawImage
    A decoded buffer with its :class:`Format`. Each transformation
    (decoding, palette lookup, conversion for display) returns a new
    :class:`RawImage` with its own buffer.
"""

from enum import Enum, unique
from typing import NamedTuple


class Format(NamedTuple):
    """The shape of a pixel buffer, independent of its encoding."""

    width: int
    height: int
    channels: int
    # Number of bytes per sample
    channel_depth: int

    @property
    def nr_samples(self) -> int:
        """Return the number of samples in a buffer of this format."""
        return self.width * self.height * self.channels

    @property
    def nr_bytes(self) -> int:
        """Return the expected length of a buffer of this format."""
        return self.nr_samples * self.channel_depth


@unique
class Encoding(Enum):
    """How the *Pixel Data* byte stream is encoded."""

    RAW = "raw"
    RLE = "rle"
    JPEG_BASELINE = "jpeg-baseline"
    JPEG2000 = "jpeg2000"


# TODO: Python 3.11 switch to StrEnum
@unique
class PhotometricInterpretation(str, Enum):
    """Supported values for (0028,0004) *Photometric Interpretation*, after
    whitespace removal.
    """

    RGB = "RGB"
    PALETTE_COLOR = "PALETTECOLOR"
    YBR_FULL_422 = "YBR_FULL_422"
    MONOCHROME2 = "MONOCHROME2"

    def __str__(self) -> str:
        return str.__str__(self)


class Palettes(NamedTuple):
    """The red, green and blue *Palette Color Lookup Table Data*."""

    red: tuple[int, ...]
    green: tuple[int, ...]
    blue: tuple[int, ...]


class EncodedImage(NamedTuple):
    """Container for the encoded *Pixel Data* of a single frame."""

    target_format: Format
    encoding: Encoding
    photometric: PhotometricInterpretation
    # Only present when `photometric` is PALETTE_COLOR
    palettes: Palettes | None
    data: bytes


class RawImage(NamedTuple):
    """Container for decoded pixel data, samples interleaved per pixel."""

    format: Format
    data: bytes
