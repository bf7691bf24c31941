# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Module for dcmpix exception classes.

Every exception raised while extracting, decoding or converting pixel data
derives from :class:`PixelDataError`, and also from the builtin exception
closest in meaning so that code catching ``AttributeError``,
``NotImplementedError``, ``ValueError`` etc. keeps working.
"""


class PixelDataError(Exception):
    """Base class for all dcmpix errors."""


class MissingAttribute(PixelDataError, AttributeError):
    """Raised when a required element is absent from the dataset."""

    def __init__(self, keyword: str, tag: int | None = None) -> None:
        self.keyword = keyword
        self.tag = tag
        if tag is None:
            msg = f"The dataset is missing the required '{keyword}' element"
        else:
            msg = (
                f"The dataset is missing the required ({tag >> 16:04X},"
                f"{tag & 0xFFFF:04X}) '{keyword}' element"
            )

        super().__init__(msg)


class TypeMismatch(PixelDataError, TypeError):
    """Raised when an element value doesn't have the expected type."""


class UnsupportedBitDepth(PixelDataError, NotImplementedError):
    """Raised when (0028,0100) *Bits Allocated* isn't a multiple of 8."""

    def __init__(self, bits_allocated: int) -> None:
        self.bits_allocated = bits_allocated
        super().__init__(
            "Unable to decode pixel data with a (0028,0100) 'Bits Allocated' "
            f"value of {bits_allocated}, only multiples of 8 are supported"
        )


class UnsupportedTransferSyntax(PixelDataError, NotImplementedError):
    """Raised when the *Transfer Syntax UID* has no decoder."""

    def __init__(self, uid: str) -> None:
        self.uid = uid
        super().__init__(
            f"Unable to decode pixel data with a transfer syntax of '{uid}'"
        )


class UnsupportedPhotometricInterpretation(PixelDataError, NotImplementedError):
    """Raised for a *Photometric Interpretation* outside the supported set."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Unsupported (0028,0004) 'Photometric Interpretation' value '{value}'"
        )


class MultiFragmentUnsupported(PixelDataError, NotImplementedError):
    """Raised when the encapsulated *Pixel Data* holds more than one
    fragment.
    """

    def __init__(self, nr_fragments: int) -> None:
        self.nr_fragments = nr_fragments
        super().__init__(
            "Unable to decode encapsulated pixel data split across "
            f"{nr_fragments} fragments, only single fragment pixel data is "
            "supported"
        )


class MissingPaletteData(PixelDataError, AttributeError):
    """Raised when a *Palette Color Lookup Table Data* element is absent."""


class UnexpectedPaletteType(PixelDataError, TypeError):
    """Raised when *Palette Color Lookup Table Data* isn't a sequence of
    integers.
    """


class MalformedHeader(PixelDataError, ValueError):
    """Raised when the 64 byte RLE header is invalid."""


class MalformedSegment(PixelDataError, ValueError):
    """Raised when decoded RLE segments can't be interlaced."""


class ExternalDecodeError(PixelDataError, RuntimeError):
    """Raised when a third-party decoder fails or is unavailable.

    The original exception, if any, is available as ``__cause__``.
    """


class UnsupportedJpeg2000Output(PixelDataError, NotImplementedError):
    """Raised when JPEG 2000 data can't be returned at the requested shape."""

    def __init__(self, channels: int, channel_depth: int) -> None:
        self.channels = channels
        self.channel_depth = channel_depth
        super().__init__(
            f"JPEG 2000 output is unsupported: {channels} channels of depth "
            f"{channel_depth} bytes"
        )


class PaletteRequiresSingleChannel(PixelDataError, ValueError):
    """Raised when palette lookup is attempted on multi-sample data."""


class UnsupportedPaletteBitDepth(PixelDataError, ValueError):
    """Raised when palette indices aren't 1 or 2 bytes wide."""


class PaletteIndexOutOfRange(PixelDataError, IndexError):
    """Raised when a pixel value has no entry in the lookup tables."""


class UnsupportedChannelLayout(PixelDataError, ValueError):
    """Raised when a buffer can't be converted to the requested layout."""


class UnsupportedImageFormat(PixelDataError, ValueError):
    """Raised when an image can't be written in the requested file format."""
