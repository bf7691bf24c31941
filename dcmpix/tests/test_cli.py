# Copyright 2024 dcmpix authors. See LICENSE file for details.
"""Tests for command-line interface"""

from argparse import ArgumentTypeError
import logging

import pytest

from PIL import Image
from pydicom.uid import ImplicitVRLittleEndian

from dcmpix import config
from dcmpix.cli.main import dataset_parser, main
from dcmpix.tests._handler_common import make_dataset, write_dataset


@pytest.fixture
def mono8_file(tmp_path, mono8_ds):
    path = tmp_path / "mono8.dcm"
    write_dataset(mono8_ds, path)
    return path


class TestDatasetParser:
    def test_read(self, mono8_file):
        """The CLI dataset argument is read with pydicom"""
        ds = dataset_parser(str(mono8_file))
        assert 2 == ds.Rows

    def test_missing_file(self, tmp_path):
        """A missing file raises an argument error"""
        path = tmp_path / "missing.dcm"
        with pytest.raises(ArgumentTypeError, match=r"not found"):
            dataset_parser(str(path))

    def test_not_dicom(self, tmp_path):
        """A file that isn't DICOM raises an argument error"""
        path = tmp_path / "text.txt"
        path.write_text("not a DICOM file")
        with pytest.raises(ArgumentTypeError, match=r"Error reading"):
            dataset_parser(str(path))


class TestCLIcall:
    """Test calls to `dcmpix` command-line interface"""

    def test_bare_command(self, capsys):
        """CLI `dcmpix` with no arguments shows the help"""
        main([])
        out, _ = capsys.readouterr()
        assert out.startswith("usage: dcmpix [-h]")

    def test_help(self, capsys):
        """CLI `help` lists the subcommands"""
        main(["help"])
        out, _ = capsys.readouterr()
        assert "Use dcmpix help [subcommand]" in out
        assert "Available subcommands:" in out
        for subcommand in ("png", "bench", "tags"):
            assert subcommand in out

    def test_help_subcommand(self, capsys):
        """CLI `help png` shows the help for the subcommand"""
        main(["help", "png"])
        out, _ = capsys.readouterr()
        assert "usage: dcmpix png" in out
        assert "OUTPUT" in out

    def test_png(self, capsys, tmp_path, mono8_file):
        """CLI `png` writes the pixel data to a PNG file"""
        png = tmp_path / "mono8.png"
        main(["png", str(mono8_file), str(png)])
        out, _ = capsys.readouterr()
        assert "Wrote a 2x2 image with 1 channel(s)" in out
        with Image.open(png) as im:
            assert b"\x00\x40\x80\xff" == im.tobytes()

    def test_png_unsupported(self, capsys, tmp_path, mono8_ds):
        """CLI `png` reports decoding errors and exits with a failure"""
        mono8_ds.file_meta.TransferSyntaxUID = ImplicitVRLittleEndian
        path = tmp_path / "implicit.dcm"
        write_dataset(mono8_ds, path)
        png = tmp_path / "implicit.png"
        with pytest.raises(SystemExit) as exc:
            main(["png", str(path), str(png)])

        assert 1 == exc.value.code
        _, err = capsys.readouterr()
        assert err.startswith("dcmpix: error: Unable to decode pixel data")
        assert not png.exists()

    def test_png_missing_input(self, capsys, tmp_path):
        """CLI `png` with a missing input is an argument error"""
        with pytest.raises(SystemExit) as exc:
            main(["png", str(tmp_path / "a.dcm"), str(tmp_path / "a.png")])

        assert 2 == exc.value.code
        _, err = capsys.readouterr()
        assert "not found" in err

    def test_tags(self, capsys, mono8_file):
        """CLI `tags` shows the elements"""
        main(["tags", str(mono8_file)])
        out, _ = capsys.readouterr()
        assert "Rows" in out
        assert "PhotometricInterpretation" in out
        assert "MONOCHROME2" in out
        assert "TransferSyntaxUID" not in out

    def test_tags_file_meta(self, capsys, mono8_file):
        """CLI `tags --file-meta` includes the file meta information"""
        main(["tags", "--file-meta", str(mono8_file)])
        out, _ = capsys.readouterr()
        assert "TransferSyntaxUID" in out
        assert "1.2.840.10008.1.2.1" in out

    def test_bench(self, capsys, tmp_path, mono8_ds):
        """CLI `bench` shows the results per category"""
        category = tmp_path / "native"
        category.mkdir()
        write_dataset(mono8_ds, category / "mono8.dcm")
        main(["bench", str(tmp_path), "--workers", "2"])
        out, _ = capsys.readouterr()
        assert str(category) in out
        assert "  mono8.dcm" in out
        assert "    4 bytes" in out
        assert "Decoding :" in out

    def test_bench_not_a_directory(self, capsys, tmp_path):
        """CLI `bench` requires a directory"""
        with pytest.raises(SystemExit):
            main(["bench", str(tmp_path / "missing")])

        _, err = capsys.readouterr()
        assert "is not a directory" in err

    @pytest.mark.parametrize("workers", ["0", "x"])
    def test_bench_invalid_workers(self, capsys, tmp_path, workers):
        """CLI `bench --workers` must be a positive integer"""
        with pytest.raises(SystemExit):
            main(["bench", str(tmp_path), "--workers", workers])

        _, err = capsys.readouterr()
        assert "is not a positive integer" in err

    def test_verbose(self, no_debugging):
        """CLI `--verbose` turns on debug logging"""
        main(["--verbose", "help"])
        assert config.debugging
        assert logging.DEBUG == logging.getLogger("dcmpix").level
