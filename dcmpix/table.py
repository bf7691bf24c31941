# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Flatten a dataset into rows of text for display alongside the image."""

from typing import Any, NamedTuple, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from pydicom.dataelem import DataElement
    from pydicom.dataset import Dataset


MAX_STRING_DISPLAY_LEN = 60
MAX_ARRAY_DISPLAY_LEN = 5
INDENT = 4


class TableEntry(NamedTuple):
    """A single row of the table."""

    tag_key: str
    tag_name: str
    # The full formatted value, None for sequences and separators
    value: str | None
    short_value: str


SEPARATOR = TableEntry("-", "-", None, "-")


def format_array(values: Any) -> str:
    """Return up to 5 items of `values` joined by commas."""
    items = list(values[:MAX_ARRAY_DISPLAY_LEN])
    if not items:
        return "[]"

    if len(items) == 1 and len(values) == 1:
        return str(items[0])

    return ",".join(str(v) for v in items)


def format_value(elem: "DataElement") -> tuple[str, str | None]:
    """Return the short and full text for the value of `elem`.

    Returns
    -------
    tuple[str, str | None]
        The value shortened to at most 60 characters (plus ``' <...>'``)
        and the full value, which is ``None`` for sequences and encapsulated
        pixel data.
    """
    if elem.VR == "SQ":
        return "<sequence>", None

    if elem.tag == 0x7FE00010 and elem.is_undefined_length:
        return "<pixel sequence>", None

    value = elem.value
    if value is None or (hasattr(value, "__len__") and len(value) == 0):
        text = "<empty>"
    elif isinstance(value, (bytes, bytearray, list, tuple)):
        text = format_array(value)
    elif hasattr(value, "__getitem__") and not isinstance(value, str):
        # MultiValue
        text = format_array(value)
    else:
        text = str(value)

    text = text.rstrip("\x00")
    if len(text) > MAX_STRING_DISPLAY_LEN:
        return f"{text[:MAX_STRING_DISPLAY_LEN]} <...>", text

    return text, text


def get_dicom_table(ds: "Dataset", depth: int = 0) -> list[TableEntry]:
    """Return the elements of `ds` as a list of :class:`TableEntry`.

    The items of sequences are listed after the sequence element, indented
    by 4 spaces per nesting level, with a separator row before each item and
    after the last one.

    Parameters
    ----------
    ds : pydicom.dataset.Dataset
        The dataset to tabulate.
    depth : int, optional
        The nesting level of `ds`, used for indentation.
    """
    table = []
    pad = " " * (INDENT * depth)
    for elem in ds:
        short_value, value = format_value(elem)
        table.append(
            TableEntry(
                f"{pad}{elem.tag}",
                elem.keyword or "Unknown",
                value,
                short_value,
            )
        )

        if elem.VR == "SQ":
            for item in elem.value:
                table.append(SEPARATOR)
                table.extend(get_dicom_table(item, depth + 1))
            table.append(SEPARATOR)

    return table


def format_dicom_table(table: list[TableEntry]) -> str:
    """Return `table` as aligned lines of ``'tag name : value'`` text."""
    if not table:
        return ""

    keys = [f"{entry.tag_key} {entry.tag_name}" for entry in table]
    width = max(len(key) for key in keys)

    return "\n".join(
        f"{key:{width}} : {entry.short_value}"
        for key, entry in zip(keys, table)
    )
