# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Decode RLE Lossless *Pixel Data*.

**Supported transfer syntaxes**

* 1.2.840.10008.1.2.5 : RLE Lossless

The codec functions (:func:`parse_rle_header`, :func:`rle_decode_segment`,
:func:`rle_decode_frame` and :func:`rle_encode_frame`) work on plain byte
buffers and have no knowledge of DICOM datasets.
"""

from itertools import groupby
import logging
from struct import pack, unpack
from typing import TYPE_CHECKING

try:
    import numpy as np
    HAVE_NP = True
except ImportError:
    HAVE_NP = False

from dcmpix import config
from dcmpix.errors import MalformedHeader, MalformedSegment
from dcmpix.image import Encoding, RawImage

if TYPE_CHECKING:  # pragma: no cover
    from dcmpix.image import EncodedImage


logger = logging.getLogger('dcmpix')


HANDLER_NAME = 'RLE Lossless'

DEPENDENCIES = {
    'numpy': ('http://www.numpy.org/', 'NumPy'),
}

SUPPORTED_ENCODINGS = [Encoding.RLE]

# The header has room for 16 long words, the first is the number of segments
MAX_SEGMENTS = 16


def is_available() -> bool:
    """Return ``True`` if the handler has its dependencies met."""
    return HAVE_NP


def missing_dependencies() -> list[str]:
    """Return the names of the handler's missing dependencies."""
    return [] if HAVE_NP else ['numpy']


def supports_encoding(encoding: Encoding) -> bool:
    """Return ``True`` if the handler supports the `encoding`."""
    return encoding in SUPPORTED_ENCODINGS


def get_pixeldata(encoded: "EncodedImage") -> RawImage:
    """Return the decoded RLE *Pixel Data*.

    The segments of RLE encoded data with more than one byte per sample are
    ordered from MSB to LSB, so after interlacing each sample is big endian.
    The bytes of each sample are reversed to return little endian samples
    unless :attr:`~dcmpix.config.Settings.rle_segment_order` is ``'<'``.

    Parameters
    ----------
    encoded : dcmpix.image.EncodedImage
        The RLE encoded frame and its description.

    Returns
    -------
    dcmpix.image.RawImage
        The decoded pixel data, with the shape given by
        `encoded.target_format`.
    """
    fmt = encoded.target_format
    frame = rle_decode_frame(encoded.data)

    if len(frame) != fmt.nr_bytes:
        logger.warning(
            f"The amount of decoded RLE data doesn't match the expected "
            f"amount ({len(frame)} vs. {fmt.nr_bytes} bytes)"
        )

    nr_bytes = fmt.channel_depth
    if nr_bytes > 1 and config.settings.rle_segment_order == ">":
        # Discard any incomplete trailing sample
        frame = frame[:len(frame) - len(frame) % nr_bytes]
        arr = np.frombuffer(frame, dtype=np.uint8).reshape(-1, nr_bytes)
        frame = arr[:, ::-1].tobytes()

    logger.debug(f"Decoded {len(frame)} bytes of RLE pixel data")

    return RawImage(fmt, bytes(frame))


# RLE decoding functions
def parse_rle_header(src: bytes) -> list[int]:
    """Return a list of byte offsets for the segments in RLE data.

    **RLE Header Format**

    The RLE Header contains the number of segments for the image and the
    starting offset of each segment. Each of these numbers is represented as
    an unsigned long stored in little-endian. The RLE Header is 16 long words
    in length (i.e. 64 bytes).

    As an example, the table below describes an RLE Header with 3 segments as
    would typically be used with 8-bit RGB data (with 1 segment per channel).

    +--------------+---------------------------------+------------+
    | Byte  offset | Description                     | Value      |
    +==============+=================================+============+
    | 0            | Number of segments              | 3          |
    +--------------+---------------------------------+------------+
    | 4            | Offset of segment 1, N bytes    | 64         |
    +--------------+---------------------------------+------------+
    | 8            | Offset of segment 2, M bytes    | 64 + N     |
    +--------------+---------------------------------+------------+
    | 12           | Offset of segment 3             | 64 + N + M |
    +--------------+---------------------------------+------------+
    | 16           | Offset of segment 4 (not used)  | 0          |
    +--------------+---------------------------------+------------+
    | ...          | ...                             | 0          |
    +--------------+---------------------------------+------------+
    | 60           | Offset of segment 15 (not used) | 0          |
    +--------------+---------------------------------+------------+

    Parameters
    ----------
    src : bytes
        The RLE frame data, only the first 64 bytes are used.

    Returns
    -------
    list of int
        The byte offsets for each segment in the RLE data. A segment count
        larger than 16 is clamped to 16.

    Raises
    ------
    dcmpix.errors.MalformedHeader
        If `src` is shorter than 64 bytes or the number of segments is 0.

    References
    ----------
    DICOM Standard, Part 5, :dcm:`Annex G<part05/chapter_G.html>`
    """
    if len(src) < 64:
        raise MalformedHeader(
            f"The RLE header must be 64 bytes long, only {len(src)} bytes "
            "are available"
        )

    nr_segments = unpack('<L', src[:4])[0]
    if nr_segments == 0:
        raise MalformedHeader("The RLE header specifies 0 segments")

    if nr_segments > MAX_SEGMENTS:
        logger.debug(
            f"The RLE header specifies {nr_segments} segments, only the "
            f"first {MAX_SEGMENTS} will be used"
        )
        nr_segments = MAX_SEGMENTS

    # With 16 segments the last offset is in bytes 64 to 67
    header = bytes(src[:4 * (nr_segments + 1)])
    if len(header) != 4 * (nr_segments + 1):
        raise MalformedHeader(
            f"The RLE data is too short to contain {nr_segments} segment "
            "offsets"
        )

    return list(unpack(f'<{nr_segments}L', header[4:]))


def rle_decode_frame(src: bytes) -> bytearray:
    """Decodes a single frame of RLE encoded data.

    Each segment is decoded independently and the segments are then
    interlaced, so that for `N` segments the output byte ``k * N + s`` is byte
    ``k`` of segment ``s``.

    Parameters
    ----------
    src : bytes
        The RLE frame data, including the 64 byte header.

    Returns
    -------
    bytearray
        The frame's decoded data. The length of the first segment determines
        the number of bytes used from each segment.

    Raises
    ------
    dcmpix.errors.MalformedHeader
        If the header is invalid.
    dcmpix.errors.MalformedSegment
        If a segment decodes to fewer bytes than the first segment.
    """
    offsets = parse_rle_header(src)
    nr_segments = len(offsets)

    # Ensure the last segment gets decoded
    offsets.append(len(src))

    segments = [
        rle_decode_segment(src[offsets[ii]:offsets[ii + 1]])
        for ii in range(nr_segments)
    ]

    # Example:
    # RLE encoded data is ordered like this (for 16-bit, 3 sample):
    #  Segment: 0     | 1     | 2     | 3     | 4     | 5
    #           R MSB | R LSB | G MSB | G LSB | B MSB | B LSB
    # and interlaced to:
    #  Pxl 1                               | Pxl 2                   | ...
    #  R MSB R LSB G MSB G LSB B MSB B LSB | R MSB R LSB G MSB ...   | ...
    length = len(segments[0])
    decoded = bytearray(length * nr_segments)
    for ii, segment in enumerate(segments):
        if len(segment) < length:
            raise MalformedSegment(
                f"RLE segment {ii} decoded to {len(segment)} bytes, which is "
                f"less than the {length} bytes of the first segment"
            )

        decoded[ii::nr_segments] = segment[:length]

    return decoded


def rle_decode_segment(data: bytes) -> bytearray:
    """Return a single segment of decoded RLE data as bytearray.

    Each run starts with a header byte `n`:

    * ``n + 1 > 129``: replicate the next byte ``257 - n`` times (2 to 128)
    * ``n + 1 < 129``: copy the next ``n + 1`` bytes literally
    * ``n + 1 == 129``: stop decoding the segment

    Decoding also stops when fewer than 2 bytes remain or when a literal run
    is longer than the remaining data.

    Parameters
    ----------
    data : bytes
        The segment data to be decoded.

    Returns
    -------
    bytearray
        The decoded segment.
    """
    result = bytearray()
    result_extend = result.extend
    pos = 0
    end = len(data)

    while end - pos >= 2:
        # header_byte is N + 1
        header_byte = data[pos] + 1
        pos += 1
        if header_byte > 129:
            # Extend by copying the next byte (-N + 1) times
            # however since using uint8 instead of int8 this will be
            # (256 - N + 1) times
            result_extend(data[pos:pos + 1] * (3 + (255 - header_byte)))
            pos += 1
        elif header_byte < 129:
            # Extend by literally copying the next (N + 1) bytes
            if pos + header_byte > end:
                break

            result_extend(data[pos:pos + header_byte])
            pos += header_byte
        else:
            break

    return result


# RLE encoding functions
def rle_encode_frame(src: bytes, nr_segments: int) -> bytearray:
    """Return interleaved pixel data as an RLE encoded frame.

    Parameters
    ----------
    src : bytes
        The pixel data, with the bytes for each segment interleaved in the same
        way as the output of :func:`rle_decode_frame`.
    nr_segments : int
        The number of segments to split `src` into, between 1 and 15.

    Returns
    -------
    bytearray
        An RLE encoded frame, including the RLE header, following the format
        specified by the DICOM Standard, Part 5,
        :dcm:`Annex G<part05/chapter_G.html>`.
    """
    if not 1 <= nr_segments <= 15:
        raise ValueError(
            "Unable to encode as the DICOM standard only allows "
            "between 1 and 15 segments in RLE encoded data"
        )

    if len(src) % nr_segments:
        raise ValueError(
            f"The length of the data ({len(src)} bytes) isn't a multiple of "
            f"the number of segments ({nr_segments})"
        )

    rle_data = bytearray()
    seg_lengths = []
    for ii in range(nr_segments):
        segment = _rle_encode_segment(src[ii::nr_segments])
        rle_data.extend(segment)
        seg_lengths.append(len(segment))

    # Add the number of segments to the header
    rle_header = bytearray(pack('<L', len(seg_lengths)))

    # Add the segment offsets, starting at 64 for the first segment
    # We don't need an offset to any data at the end of the last segment
    offsets = [64]
    for ii, length in enumerate(seg_lengths[:-1]):
        offsets.append(offsets[ii] + length)
    rle_header.extend(pack(f'<{len(offsets)}L', *offsets))

    # Add trailing padding to make up the rest of the header (if required)
    rle_header.extend(b'\x00' * (64 - len(rle_header)))

    return rle_header + rle_data


def _rle_encode_segment(src: bytes) -> bytearray:
    """Return `src` as an RLE encoded segment, padded to even length with a
    trailing ``0x00``.
    """
    out = bytearray()
    out_append = out.append
    out_extend = out.extend

    literal: list[int] = []

    def flush_literal() -> None:
        for ii in range(0, len(literal), 128):
            _run = literal[ii:ii + 128]
            out_append(len(_run) - 1)
            out_extend(_run)

        literal.clear()

    for key, group in groupby(src):
        run = len(list(group))
        if run == 1:
            literal.append(key)
            continue

        flush_literal()
        for ii in range(0, run, 128):
            length = min(run - ii, 128)
            if length > 1:
                # Replicate run
                out_append(257 - length)
            else:
                # Literal run only if last replicate part is length 1
                out_append(0)

            out_append(key)

    # Final literal run if literal isn't followed by a replicate run
    flush_literal()

    # Pad odd length data with a trailing 0x00 byte
    out.extend(b'\x00' * (len(out) % 2))

    return out
