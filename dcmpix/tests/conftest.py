# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Fixtures used in different tests."""

import logging

import pytest
from pydicom.dataelem import DataElement

from dcmpix import config
from dcmpix.tests._handler_common import make_dataset


@pytest.fixture
def mono8_ds():
    """A 2x2 8-bit greyscale dataset."""
    return make_dataset(b"\x00\x40\x80\xff")


@pytest.fixture
def palette_ds():
    """A 3x1 8-bit palette color dataset with 3 entry lookup tables."""
    ds = make_dataset(
        b"\x00\x01\x02", rows=1, columns=3, photometric="PALETTE COLOR"
    )
    ds[0x00281201] = DataElement(
        0x00281201, "OW", b"\x00\x00\x00\x80\xff\xff"
    )
    ds[0x00281202] = DataElement(
        0x00281202, "OW", b"\x00\x00\xff\xff\x00\x00"
    )
    ds[0x00281203] = DataElement(
        0x00281203, "OW", b"\xff\xff\x00\x00\x34\x12"
    )

    return ds


@pytest.fixture
def rle_segment_order():
    value = config.settings.rle_segment_order
    yield
    config.settings.rle_segment_order = value


@pytest.fixture
def no_debugging():
    logger = logging.getLogger("dcmpix")
    handlers = logger.handlers[:]
    yield
    logger.handlers = handlers
    config.debug(False, False)
