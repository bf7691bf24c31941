# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Return native (uncompressed) *Pixel Data* unchanged.

**Supported transfer syntaxes**

* 1.2.840.10008.1.2.1 : Explicit VR Little Endian
"""

import logging
from typing import TYPE_CHECKING

from dcmpix.image import Encoding, RawImage

if TYPE_CHECKING:  # pragma: no cover
    from dcmpix.image import EncodedImage


logger = logging.getLogger('dcmpix')


HANDLER_NAME = 'Native'

DEPENDENCIES: dict[str, tuple[str, str]] = {}

SUPPORTED_ENCODINGS = [Encoding.RAW]


def is_available() -> bool:
    """Return ``True`` if the handler has its dependencies met."""
    return True


def missing_dependencies() -> list[str]:
    """Return the names of the handler's missing dependencies."""
    return []


def supports_encoding(encoding: Encoding) -> bool:
    """Return ``True`` if the handler supports the `encoding`."""
    return encoding in SUPPORTED_ENCODINGS


def get_pixeldata(encoded: "EncodedImage") -> RawImage:
    """Return a copy of the native *Pixel Data* in `encoded`."""
    fmt = encoded.target_format
    if len(encoded.data) < fmt.nr_bytes:
        logger.warning(
            f"The length of the pixel data ({len(encoded.data)} bytes) is "
            f"less than expected ({fmt.nr_bytes} bytes)"
        )

    return RawImage(fmt, bytes(encoded.data))
