# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Tests for dcmpix.decoding"""

from types import SimpleNamespace

import pytest

from pydicom.dataelem import DataElement
from pydicom.encaps import encapsulate
from pydicom.uid import RLELossless

from dcmpix import config
from dcmpix.attributes import get_encoded_image
from dcmpix.decoding import (
    decode_image, decode_pixel_data, get_display_buffer, get_image
)
from dcmpix.errors import ExternalDecodeError, UnsupportedTransferSyntax
from dcmpix.image import (
    EncodedImage, Encoding, Format, PhotometricInterpretation, RawImage
)
from dcmpix.pixel_data_handlers import native_handler, rle_handler
from dcmpix.pixel_data_handlers.rle_handler import rle_encode_frame
from dcmpix.tests._handler_common import make_dataset


def _fake_handler(name, available, result=None):
    return SimpleNamespace(
        HANDLER_NAME=name,
        supports_encoding=lambda encoding: encoding == Encoding.RLE,
        is_available=lambda: available,
        missing_dependencies=lambda: [] if available else ["numpy"],
        get_pixeldata=lambda encoded: result,
    )


RLE_IMAGE = EncodedImage(
    Format(1, 1, 1, 1),
    Encoding.RLE,
    PhotometricInterpretation.MONOCHROME2,
    None,
    bytes(rle_encode_frame(b"\x07\x07", 1)),
)


class TestDecodePixelData:
    """Tests for decode_pixel_data()"""

    def test_no_handler_raises(self, monkeypatch):
        """Test an encoding no handler supports raises."""
        monkeypatch.setattr(config, "pixel_data_handlers", [native_handler])
        with pytest.raises(UnsupportedTransferSyntax, match="'RLE'"):
            decode_pixel_data(RLE_IMAGE)

    def test_missing_dependencies_raises(self, monkeypatch):
        """Test handlers without their dependencies raise."""
        monkeypatch.setattr(
            config, "pixel_data_handlers", [_fake_handler("Fake", False)]
        )
        msg = (
            r"The following handlers are available to decode the pixel data "
            r"however they are missing required dependencies: Fake \(req. "
            r"numpy\)"
        )
        with pytest.raises(ExternalDecodeError, match=msg):
            decode_pixel_data(RLE_IMAGE)

    def test_first_available_handler_used(self, monkeypatch):
        """Test the first handler with its dependencies met is used."""
        first = RawImage(Format(1, 1, 1, 1), b"\x01")
        second = RawImage(Format(1, 1, 1, 1), b"\x02")
        handlers = [
            _fake_handler("Missing", False),
            _fake_handler("First", True, first),
            _fake_handler("Second", True, second),
        ]
        monkeypatch.setattr(config, "pixel_data_handlers", handlers)
        assert first is decode_pixel_data(RLE_IMAGE)

    def test_rle(self):
        """Test decoding with the default handlers."""
        image = decode_pixel_data(RLE_IMAGE)
        assert b"\x07\x07" == image.data

    def test_decode_repeatable(self, mono8_ds):
        """Test decoding the same image twice gives equal results."""
        encoded = get_encoded_image(mono8_ds)
        assert decode_image(encoded) == decode_image(encoded)
        assert b"\x00\x40\x80\xff" == encoded.data

    def test_rle_handler_reachable(self):
        """Test the RLE handler is in the default handlers."""
        assert rle_handler in config.pixel_data_handlers


class TestGetImage:
    """Tests for get_image()"""

    def test_native(self, mono8_ds):
        """Test native pixel data is returned unchanged."""
        image = get_image(mono8_ds)
        assert Format(2, 2, 1, 1) == image.format
        assert b"\x00\x40\x80\xff" == image.data

    def test_native_16bit(self):
        """Test native 16-bit pixel data stays little endian."""
        ds = make_dataset(b"\x01\x00\x00\x01", rows=1, bits_allocated=16)
        image = get_image(ds)
        assert Format(2, 1, 1, 2) == image.format
        assert b"\x01\x00\x00\x01" == image.data

    def test_palette(self, palette_ds):
        """Test the lookup tables are applied to palette color data."""
        image = get_image(palette_ds)
        assert Format(3, 1, 3, 2) == image.format
        assert (
            b"\x00\x00\x00\x00\xFF\xFF"
            b"\x00\x80\xFF\xFF\x00\x00"
            b"\xFF\xFF\x00\x00\x34\x12"
        ) == image.data

    def test_palette_rle_16bit(self, palette_ds, rle_segment_order):
        """Test 16-bit RLE indices are looked up in the right byte order."""
        # Big endian samples 0x0002, 0x0001, 0x0000 split into MSB and LSB
        src = rle_encode_frame(b"\x00\x02\x00\x01\x00\x00", 2)
        palette_ds.file_meta.TransferSyntaxUID = RLELossless
        palette_ds.BitsAllocated = 16
        palette_ds[0x7FE00010] = DataElement(
            0x7FE00010, "OB", encapsulate([bytes(src)]), is_undefined_length=True
        )
        image = get_image(palette_ds)
        assert Format(3, 1, 3, 2) == image.format
        assert (
            b"\xFF\xFF\x00\x00\x34\x12"
            b"\x00\x80\xFF\xFF\x00\x00"
            b"\x00\x00\x00\x00\xFF\xFF"
        ) == image.data

    def test_unsupported_transfer_syntax(self, mono8_ds, monkeypatch):
        """Test an unsupported transfer syntax raises without decoding."""
        calls = []
        handler = SimpleNamespace(
            HANDLER_NAME="Recorder",
            supports_encoding=lambda encoding: True,
            is_available=lambda: True,
            missing_dependencies=lambda: [],
            get_pixeldata=calls.append,
        )
        monkeypatch.setattr(config, "pixel_data_handlers", [handler])
        mono8_ds.file_meta.TransferSyntaxUID = "1.2.840.10008.1.2.4.70"
        with pytest.raises(UnsupportedTransferSyntax, match="1.2.840.10008"):
            get_image(mono8_ds)

        assert [] == calls


class TestGetDisplayBuffer:
    """Tests for get_display_buffer()"""

    def test_mono8(self, mono8_ds):
        """Test greyscale data is returned as BGRA."""
        width, height, data = get_display_buffer(mono8_ds)
        assert (2, 2) == (width, height)
        assert (
            b"\x00\x00\x00\xFF\x40\x40\x40\xFF"
            b"\x80\x80\x80\xFF\xFF\xFF\xFF\xFF"
        ) == data

    def test_palette(self, palette_ds):
        """Test palette color data is returned as 8-bit BGRA."""
        width, height, data = get_display_buffer(palette_ds)
        assert (3, 1) == (width, height)
        assert (
            b"\xFF\x00\x00\xFF"
            b"\x00\xFF\x80\xFF"
            b"\x12\x00\xFF\xFF"
        ) == data
