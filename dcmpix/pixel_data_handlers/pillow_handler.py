# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Use the `pillow <https://python-pillow.org/>`_ Python package
to decode JPEG and JPEG 2000 *Pixel Data*.

**Supported transfer syntaxes**

* 1.2.840.10008.1.2.4.50 : JPEG Baseline (Process 1)
* 1.2.840.10008.1.2.4.90 : JPEG 2000 Image Compression (Lossless Only)
"""

import io
import logging
from typing import TYPE_CHECKING

try:
    from PIL import Image, features
    HAVE_PIL = True
    HAVE_JPEG = features.check_codec("jpg")
    HAVE_JPEG2K = features.check_codec("jpg_2000")
except ImportError:
    HAVE_PIL = False
    HAVE_JPEG = False
    HAVE_JPEG2K = False

from dcmpix.errors import ExternalDecodeError, UnsupportedJpeg2000Output
from dcmpix.image import (
    Encoding, Format, PhotometricInterpretation, RawImage
)
from dcmpix.misc import warn_and_log

if TYPE_CHECKING:  # pragma: no cover
    from dcmpix.image import EncodedImage


logger = logging.getLogger('dcmpix')


HANDLER_NAME = 'Pillow'

DEPENDENCIES = {
    'PIL': ('https://python-pillow.org/', 'Pillow'),
}

SUPPORTED_ENCODINGS = [Encoding.JPEG_BASELINE, Encoding.JPEG2000]

# (samples per pixel, bytes per sample) -> Pillow mode
JPEG2000_MODES = {
    (1, 1): "L",
    (3, 1): "RGB",
    (4, 1): "RGBA",
}
# Pillow mode -> number of channels
_CHANNELS = {"L": 1, "RGB": 3, "RGBA": 4}


def is_available() -> bool:
    """Return ``True`` if the handler has its dependencies met."""
    return HAVE_PIL


def missing_dependencies() -> list[str]:
    """Return the names of the handler's missing dependencies."""
    return [] if HAVE_PIL else ['Pillow']


def supports_encoding(encoding: Encoding) -> bool:
    """Return ``True`` if the handler supports the `encoding`."""
    return encoding in SUPPORTED_ENCODINGS


def _jpeg_color_space(im: "Image.Image") -> str | None:
    """Return the color space signalled by a JPEG codestream, if any.

    Returns ``"YCbCr"``, ``"RGB"`` or ``None`` if the codestream doesn't
    say.
    """
    cs = None

    # APP0 JFIF implies YCbCr
    if "jfif" in im.info:
        cs = "YCbCr"

    # SOF components as (ID, horizontal, vertical, table)
    components = getattr(im, "layer", [])
    # If any components are subsampled then it's very likely not RGB
    if any(h != 1 or v != 1 for _, h, v, _ in components):
        cs = "YCbCr"

    # Some applications use the component IDs to flag the colour components
    if bytes(c[0] for c in components) in (b"RGB", b"rgb"):
        cs = "RGB"

    # APP14 (Adobe) transform flag, 0 is RGB and 1 is YCbCr
    if "adobe_transform" in im.info:
        cs = "RGB" if im.info["adobe_transform"] == 0 else "YCbCr"

    return cs


def _decode(
    src: bytes,
    mode: str | None,
    photometric: PhotometricInterpretation | None = None,
) -> RawImage:
    """Return the image in `src` decoded by Pillow.

    Parameters
    ----------
    src : bytes
        A JPEG or JPEG 2000 codestream.
    mode : str or None
        The Pillow mode to convert the decoded image to, or ``None`` to
        keep greyscale and RGB images as they are and convert anything else
        to RGB.
    photometric : dcmpix.image.PhotometricInterpretation, optional
        For JPEG, the dataset's *Photometric Interpretation*. If ``RGB``
        and the codestream doesn't signal a color space then the samples
        are returned without the YCbCr to RGB transform.
    """
    try:
        with Image.open(io.BytesIO(src)) as im:
            is_rgb = photometric == PhotometricInterpretation.RGB
            if is_rgb and im.mode == "RGB":
                cs = _jpeg_color_space(im)
                if cs is None:
                    # Samples are already RGB, no transform
                    im.draft("YCbCr", im.size)
                elif cs == "YCbCr":
                    warn_and_log(
                        "A mismatch was found between the JPEG codestream "
                        "and dataset 'Photometric Interpretation' value. If "
                        "the decoded pixel data is in the RGB color space "
                        "then the 'Photometric Interpretation' should be "
                        "'YBR_FULL_422'"
                    )

            im.load()
            if im.mode == "YCbCr":
                # Untransformed samples, relabel only
                im = Image.frombytes("RGB", im.size, im.tobytes())

            if mode is None:
                mode = im.mode if im.mode in ("L", "RGB") else "RGB"

            if im.mode != mode:
                logger.debug(
                    f"Converting the decoded '{im.mode}' image to '{mode}'"
                )
                im = im.convert(mode)

            fmt = Format(im.width, im.height, _CHANNELS[mode], 1)
            data = im.tobytes()
    except Exception as exc:
        raise ExternalDecodeError(
            f"Pillow was unable to decode the pixel data: {exc}"
        ) from exc

    return RawImage(fmt, data)


def get_pixeldata(encoded: "EncodedImage") -> RawImage:
    """Return the decoded JPEG or JPEG 2000 *Pixel Data*.

    Parameters
    ----------
    encoded : dcmpix.image.EncodedImage
        The encoded frame and its description.

    Returns
    -------
    dcmpix.image.RawImage
        The decoded pixel data with 1 byte per sample. For JPEG 2000 the
        width and height are taken from the codestream and the number of
        channels from `encoded.target_format`.

    Raises
    ------
    dcmpix.errors.UnsupportedJpeg2000Output
        If JPEG 2000 data is requested with a shape other than 1, 3 or 4
        channels of 1 byte.
    dcmpix.errors.ExternalDecodeError
        If Pillow or its codec is missing, or fails to decode the data.
    """
    fmt = encoded.target_format
    if encoded.encoding == Encoding.JPEG2000:
        key = (fmt.channels, fmt.channel_depth)
        if key not in JPEG2000_MODES:
            raise UnsupportedJpeg2000Output(*key)

    if not HAVE_PIL:
        raise ExternalDecodeError(
            "The pillow package is required to decode JPEG and JPEG 2000 "
            "pixel data, and pillow could not be imported"
        )

    if encoded.encoding == Encoding.JPEG_BASELINE:
        if not HAVE_JPEG:
            raise ExternalDecodeError(
                "The pixel data cannot be decoded because Pillow lacks the "
                "JPEG plugin"
            )

        image = _decode(encoded.data, None, encoded.photometric)
        if image.format.channels != fmt.channels:
            logger.warning(
                f"The JPEG data has {image.format.channels} channels but "
                f"the dataset has {fmt.channels} samples per pixel"
            )
    else:
        if not HAVE_JPEG2K:
            raise ExternalDecodeError(
                "The pixel data cannot be decoded because Pillow lacks the "
                "JPEG 2000 plugin"
            )

        image = _decode(
            encoded.data, JPEG2000_MODES[(fmt.channels, fmt.channel_depth)]
        )

    logger.debug(f"Successfully read {len(image.data)} pixel bytes")

    return image
