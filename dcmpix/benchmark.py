# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Time reading and decoding of DICOM files.

The directory to benchmark is expected to be laid out as
``<root>/<category>/<file>``, for example one category per transfer syntax.
"""

from concurrent.futures import ThreadPoolExecutor
import logging
import os
from pathlib import Path
import time
from typing import Iterator, NamedTuple

from pydicom import dcmread
from pydicom.errors import InvalidDicomError

from dcmpix.decoding import get_image
from dcmpix.errors import PixelDataError


logger = logging.getLogger('dcmpix')


class BenchmarkResult(NamedTuple):
    path: Path
    # Length of the decoded pixel data
    nr_bytes: int
    # Seconds
    open_time: float
    decode_time: float
    error: str | None = None


def benchmark_file(path: str | os.PathLike) -> BenchmarkResult:
    """Return the time taken to read and to decode the file at `path`.

    Failures to read or decode the file are logged and returned as the
    `error` of the result rather than raised.
    """
    path = Path(path)
    t0 = time.perf_counter()
    try:
        ds = dcmread(path)
    except (InvalidDicomError, OSError) as exc:
        logger.error(f"Unable to read '{path}': {exc}")
        return BenchmarkResult(
            path, 0, time.perf_counter() - t0, 0.0, str(exc)
        )

    t1 = time.perf_counter()
    try:
        image = get_image(ds)
    except PixelDataError as exc:
        logger.error(f"Unable to decode the pixel data in '{path}': {exc}")
        return BenchmarkResult(
            path, 0, t1 - t0, time.perf_counter() - t1, str(exc)
        )

    t2 = time.perf_counter()

    return BenchmarkResult(path, len(image.data), t1 - t0, t2 - t1)


def benchmark_directory(
    path: str | os.PathLike, workers: int = 1
) -> Iterator[tuple[Path, list[BenchmarkResult]]]:
    """Benchmark every file in the category directories of `path`.

    Parameters
    ----------
    path : str or PathLike
        The root directory, containing one directory per category.
    workers : int, optional
        The number of files to benchmark in parallel, default ``1``.

    Yields
    ------
    tuple[pathlib.Path, list[BenchmarkResult]]
        The category directory and the results for its files, in file name
        order. Files directly under `path` are ignored.
    """
    if workers < 1:
        raise ValueError("'workers' must be at least 1")

    root = Path(path)
    categories = sorted(p for p in root.iterdir() if p.is_dir())
    with ThreadPoolExecutor(max_workers=workers) as executor:
        for category in categories:
            files = sorted(p for p in category.iterdir() if p.is_file())
            logger.debug(f"Benchmarking {len(files)} files in '{category}'")
            yield category, list(executor.map(benchmark_file, files))


def format_result(result: BenchmarkResult) -> str:
    """Return `result` as an indented block of text."""
    lines = [f"  {result.path.name}"]
    if result.error:
        lines.append(f"    Failed   : {result.error}")
    else:
        lines.append(f"    {result.nr_bytes} bytes")

    lines.append(f"    Opening  : {result.open_time:.3f}s")
    lines.append(f"    Decoding : {result.decode_time:.3f}s")

    return "\n".join(lines)
