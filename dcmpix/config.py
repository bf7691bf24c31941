# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""dcmpix configuration options."""

# doc strings following items are picked up by sphinx for documentation

import logging
import os


class Settings:
    """Collection of several configuration values.
    Accessed via the singleton :attr:`settings`.
    """

    def __init__(self) -> None:
        self._rle_segment_order = ">"

    @property
    def rle_segment_order(self) -> str:
        """The order of the byte segments in RLE encoded data with more than
        8 bits per sample.

        Segments are supposed to be ordered from MSB to LSB, which is the
        default value ``'>'``. A value of ``'<'`` means the segments are in
        little endian order, which may be the case for non-conformant data.
        """
        return self._rle_segment_order

    @rle_segment_order.setter
    def rle_segment_order(self, value: str) -> None:
        if value not in (">", "<"):
            raise ValueError(
                f"Invalid RLE segment order '{value}', must be '>' or '<'"
            )

        self._rle_segment_order = value

    @property
    def sample_byte_order(self) -> str:
        """The byte order of multi-byte samples returned by the pixel data
        handlers, always ``'<'`` (little endian).
        """
        return "<"


settings = Settings()
"""The global configuration object of type :class:`Settings` to access some
of the settings. More settings may move here in later versions.
"""


# Logging system and debug function to change logging level
logger = logging.getLogger('dcmpix')
logger.addHandler(logging.NullHandler())

debugging: bool


def debug(debug_on: bool = True, default_handler: bool = True) -> None:
    """Turn on/off debugging of pixel data decoding.

    When debugging is on, the decoders used and the sizes of the buffers they
    produce are logged to the 'dcmpix' logger using Python's :mod:`logging`
    module.

    Parameters
    ----------
    debug_on : bool, optional
        If ``True`` (default) then turn on debugging, ``False`` to turn off.
    default_handler : bool, optional
        If ``True`` (default) then use :class:`logging.StreamHandler` as the
        handler for log messages.
    """
    global logger, debugging

    if default_handler:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if debug_on:
        logger.setLevel(logging.DEBUG)
        debugging = True
    else:
        logger.setLevel(logging.WARNING)
        debugging = False


# force level=WARNING, in case logging default is set differently
debug(False, False)

if os.getenv("DCMPIX_DEBUG", "").lower() in ("1", "true", "yes", "on"):
    debug(True)


import dcmpix.pixel_data_handlers.native_handler as native_handler  # noqa
import dcmpix.pixel_data_handlers.rle_handler as rle_handler  # noqa
import dcmpix.pixel_data_handlers.pillow_handler as pillow_handler  # noqa

pixel_data_handlers = [
    native_handler,
    rle_handler,
    pillow_handler,
]
"""Handlers for decoding (7FE0,0010) *Pixel Data*.

This is an ordered list of *Pixel Data* handlers that
:func:`~dcmpix.decoding.decode_pixel_data` uses to decode an
:class:`~dcmpix.image.EncodedImage`. The first handler that supports the
image's :class:`~dcmpix.image.Encoding` and has its dependencies met is used.

Handlers shall have four module level functions:

def supports_encoding(encoding: Encoding) -> bool
    Return ``True`` if the handler can decode `encoding`, ``False``
    otherwise.

def is_available() -> bool
    Return ``True`` if the handler's dependencies are installed, ``False``
    otherwise.

def missing_dependencies() -> list[str]
    Return a list of the names of the missing dependencies.

def get_pixeldata(encoded: EncodedImage) -> RawImage
    Return the decoded *Pixel Data* or raise an exception.
"""
