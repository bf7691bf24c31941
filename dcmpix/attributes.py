# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Extract the *Image Pixel* module attributes needed to decode *Pixel Data*.

**Required elements**

+-------------+---------------------------------------+-----------------------+
| Tag         | Keyword                               | Supported values      |
+=============+=======================================+=======================+
| (0002,0010) | TransferSyntaxUID (file meta)         | see ``ENCODINGS``     |
+-------------+---------------------------------------+-----------------------+
| (0028,0002) | SamplesPerPixel                       | N                     |
+-------------+---------------------------------------+-----------------------+
| (0028,0004) | PhotometricInterpretation             | RGB, PALETTE COLOR,   |
|             |                                       | YBR_FULL_422,         |
|             |                                       | MONOCHROME2           |
+-------------+---------------------------------------+-----------------------+
| (0028,0010) | Rows                                  | N                     |
+-------------+---------------------------------------+-----------------------+
| (0028,0011) | Columns                               | N                     |
+-------------+---------------------------------------+-----------------------+
| (0028,0100) | BitsAllocated                         | 8, 16, ...            |
+-------------+---------------------------------------+-----------------------+
| (0028,1201) | RedPaletteColorLookupTableData        | Required if PALETTE   |
| (0028,1202) | GreenPaletteColorLookupTableData      | COLOR                 |
| (0028,1203) | BluePaletteColorLookupTableData       |                       |
+-------------+---------------------------------------+-----------------------+
| (7FE0,0010) | PixelData                             | native or single      |
|             |                                       | fragment encapsulated |
+-------------+---------------------------------------+-----------------------+
"""

from io import BytesIO
import logging
import struct
from typing import Any, TYPE_CHECKING

from pydicom.encaps import generate_fragments, parse_basic_offsets

from dcmpix.errors import (
    MissingAttribute, TypeMismatch, UnsupportedBitDepth,
    UnsupportedTransferSyntax, UnsupportedPhotometricInterpretation,
    MultiFragmentUnsupported, MissingPaletteData, UnexpectedPaletteType,
)
from dcmpix.image import (
    EncodedImage, Encoding, Format, Palettes, PhotometricInterpretation
)

if TYPE_CHECKING:  # pragma: no cover
    from pydicom.dataset import Dataset


logger = logging.getLogger('dcmpix')


TRANSFER_SYNTAX_UID = 0x00020010
SAMPLES_PER_PIXEL = 0x00280002
PHOTOMETRIC_INTERPRETATION = 0x00280004
ROWS = 0x00280010
COLUMNS = 0x00280011
BITS_ALLOCATED = 0x00280100
PALETTE_DATA = {
    "RedPaletteColorLookupTableData": 0x00281201,
    "GreenPaletteColorLookupTableData": 0x00281202,
    "BluePaletteColorLookupTableData": 0x00281203,
}
PIXEL_DATA = 0x7FE00010

ENCODINGS = {
    "1.2.840.10008.1.2.1": Encoding.RAW,
    "1.2.840.10008.1.2.4.50": Encoding.JPEG_BASELINE,
    "1.2.840.10008.1.2.4.90": Encoding.JPEG2000,
    "1.2.840.10008.1.2.5": Encoding.RLE,
}
"""Map of supported *Transfer Syntax UID* to :class:`~dcmpix.image.Encoding`.
"""


def _get_element(ds: Any, tag: int, keyword: str) -> Any:
    """Return the element in `ds` with `tag` or raise
    :class:`~dcmpix.errors.MissingAttribute`.
    """
    elem = ds.get(tag)
    if elem is None:
        raise MissingAttribute(keyword, tag)

    return elem


def _get_int(ds: Any, tag: int, keyword: str) -> int:
    """Return the value of the element with `tag` as an :class:`int`."""
    value = _get_element(ds, tag, keyword).value
    # bool is an int subclass but never a valid US/IS value
    if not isinstance(value, int) or isinstance(value, bool):
        raise TypeMismatch(
            f"The value of the '{keyword}' element must be an integer, not "
            f"'{type(value).__name__}'"
        )

    return value


def _get_str(value: Any, keyword: str) -> str:
    if not isinstance(value, str):
        raise TypeMismatch(
            f"The value of the '{keyword}' element must be a string, not "
            f"'{type(value).__name__}'"
        )

    return value.rstrip("\x00")


def get_transfer_syntax(ds: "Dataset") -> str:
    """Return the *Transfer Syntax UID* from the file meta information of
    `ds`, without any trailing null padding.
    """
    file_meta = getattr(ds, "file_meta", None)
    if file_meta is None:
        raise MissingAttribute("TransferSyntaxUID", TRANSFER_SYNTAX_UID)

    elem = _get_element(file_meta, TRANSFER_SYNTAX_UID, "TransferSyntaxUID")

    return _get_str(elem.value, "TransferSyntaxUID")


def get_encoding(uid: str) -> Encoding:
    """Return the :class:`~dcmpix.image.Encoding` for the *Transfer Syntax
    UID* `uid`.

    Raises
    ------
    dcmpix.errors.UnsupportedTransferSyntax
        If `uid` isn't one of the supported transfer syntaxes.
    """
    try:
        return ENCODINGS[uid.rstrip("\x00")]
    except KeyError:
        raise UnsupportedTransferSyntax(uid)


def get_photometric_interpretation(
    ds: "Dataset"
) -> PhotometricInterpretation:
    """Return the *Photometric Interpretation* of `ds`.

    Trailing null padding and all whitespace are removed before the value is
    matched, so ``'PALETTE COLOR'`` becomes ``'PALETTECOLOR'``.
    """
    elem = _get_element(
        ds, PHOTOMETRIC_INTERPRETATION, "PhotometricInterpretation"
    )
    value = _get_str(elem.value, "PhotometricInterpretation")
    value = "".join(value.split())

    try:
        return PhotometricInterpretation(value)
    except ValueError:
        raise UnsupportedPhotometricInterpretation(value)


def _as_int_sequence(value: Any, keyword: str) -> tuple[int, ...]:
    """Return the *Palette Color Lookup Table Data* `value` as integers."""
    if isinstance(value, (bytes, bytearray)):
        # OW, always little endian for the supported transfer syntaxes
        if len(value) % 2:
            raise UnexpectedPaletteType(
                f"The '{keyword}' element has an odd number of bytes and "
                "can't be read as 16-bit lookup table entries"
            )

        return struct.unpack(f"<{len(value) // 2}H", value)

    if isinstance(value, int):
        values = (value, )
    elif isinstance(value, (str, dict)):
        values = None
    else:
        try:
            values = tuple(value)
        except TypeError:
            values = None

    if values is None or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in values
    ):
        raise UnexpectedPaletteType(
            f"The '{keyword}' element must contain a sequence of integers, "
            f"not '{type(value).__name__}'"
        )

    if any(not 0 <= v <= 0xFFFF for v in values):
        raise UnexpectedPaletteType(
            f"The '{keyword}' element contains values outside the 16-bit "
            "unsigned range"
        )

    return values


def get_palettes(ds: "Dataset") -> Palettes:
    """Return the red, green and blue *Palette Color Lookup Table Data*.

    Raises
    ------
    dcmpix.errors.MissingPaletteData
        If any of the lookup table elements is missing.
    dcmpix.errors.UnexpectedPaletteType
        If any of the lookup table elements isn't a sequence of integers.
    """
    luts = []
    for keyword, tag in PALETTE_DATA.items():
        elem = ds.get(tag)
        if elem is None:
            raise MissingPaletteData(
                f"The dataset is missing the '{keyword}' element required "
                "for 'PALETTE COLOR' pixel data"
            )

        luts.append(_as_int_sequence(elem.value, keyword))

    return Palettes(*luts)


def get_pixel_bytes(ds: "Dataset", encapsulated: bool = False) -> bytes:
    """Return the *Pixel Data* of `ds` as :class:`bytes`.

    Native pixel data is returned as-is, encapsulated pixel data must contain
    a single fragment, which is returned. The pixel data is encapsulated if
    `encapsulated` is ``True`` or the element has an undefined length.

    Raises
    ------
    dcmpix.errors.MultiFragmentUnsupported
        If the encapsulated pixel data contains more than one fragment.
    """
    elem = _get_element(ds, PIXEL_DATA, "PixelData")
    value = elem.value
    if not isinstance(value, (bytes, bytearray)):
        raise TypeMismatch(
            "The value of the 'PixelData' element must be bytes, not "
            f"'{type(value).__name__}'"
        )

    if not encapsulated and not getattr(elem, "is_undefined_length", False):
        return bytes(value)

    buffer = BytesIO(value)
    try:
        # Skip the Basic Offset Table item
        parse_basic_offsets(buffer)
        fragments = list(generate_fragments(buffer))
    except (ValueError, struct.error) as exc:
        raise TypeMismatch(
            f"The encapsulated 'PixelData' is invalid: {exc}"
        ) from exc

    if not fragments:
        raise MissingAttribute("PixelData", PIXEL_DATA)

    if len(fragments) > 1:
        raise MultiFragmentUnsupported(len(fragments))

    return fragments[0]


def get_encoded_image(ds: "Dataset") -> EncodedImage:
    """Return an :class:`~dcmpix.image.EncodedImage` for the *Pixel Data*
    in `ds`.

    Parameters
    ----------
    ds : pydicom.dataset.Dataset
        The dataset containing the *Image Pixel* module, with a
        (0002,0010) *Transfer Syntax UID* in its file meta information.

    Returns
    -------
    dcmpix.image.EncodedImage
        The encoded pixel data and its description.

    Raises
    ------
    dcmpix.errors.PixelDataError
        If a required element is missing, has the wrong type or an
        unsupported value.
    """
    width = _get_int(ds, COLUMNS, "Columns")
    height = _get_int(ds, ROWS, "Rows")
    bits_allocated = _get_int(ds, BITS_ALLOCATED, "BitsAllocated")
    samples_per_pixel = _get_int(ds, SAMPLES_PER_PIXEL, "SamplesPerPixel")

    if bits_allocated <= 0 or bits_allocated % 8:
        raise UnsupportedBitDepth(bits_allocated)

    encoding = get_encoding(get_transfer_syntax(ds))
    data = get_pixel_bytes(ds, encoding is not Encoding.RAW)

    photometric = get_photometric_interpretation(ds)
    palettes = None
    if photometric == PhotometricInterpretation.PALETTE_COLOR:
        palettes = get_palettes(ds)

    target_format = Format(
        width, height, samples_per_pixel, bits_allocated // 8
    )
    logger.debug(
        f"Extracted {len(data)} bytes of {encoding.name} pixel data for a "
        f"{width}x{height} image with {samples_per_pixel} samples of "
        f"{bits_allocated} bits ({photometric})"
    )

    return EncodedImage(target_format, encoding, photometric, palettes, data)
