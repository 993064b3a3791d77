"""Tests for the command line interface."""

import io
import logging
import shutil
import sys
from typing import Any

import pytest
from PIL import Image

from svg2raster import image_utils
from svg2raster.__main__ import main, parse_args
from svg2raster.formats import OutputFormat
from tests.conftest import get_fixture


@pytest.fixture
def svg_path(tmp_path: Any) -> str:
    path = tmp_path / "square.svg"
    shutil.copy(get_fixture("square.svg"), path)
    return str(path)


def set_stdin(monkeypatch: pytest.MonkeyPatch, data: bytes) -> None:
    monkeypatch.setattr(sys, "stdin", io.TextIOWrapper(io.BytesIO(data)))


class TestParseArgs:
    def test_defaults(self) -> None:
        args = parse_args(["input.svg"])
        assert args.input == "input.svg"
        assert args.output is None
        assert args.filename is None
        assert args.formats is None
        assert args.width is None
        assert args.height is None
        assert args.scale == 1.0
        assert args.background is None

    def test_formats_are_deduplicated(self) -> None:
        args = parse_args(["input.svg", "--format", "png,jpeg,png"])
        assert args.formats == [OutputFormat.PNG, OutputFormat.JPEG]

    def test_unknown_format(self) -> None:
        with pytest.raises(SystemExit) as excinfo:
            parse_args(["input.svg", "--format", "png,gif"])
        assert excinfo.value.code == 2

    def test_negative_width(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["input.svg", "--width", "-3"])


class TestMain:
    def test_converts_file(self, svg_path: str, tmp_path: Any) -> None:
        output = tmp_path / "out"
        status = main([svg_path, "--output", str(output), "--format", "png,jpeg"])

        assert status == 0
        with Image.open(output / "square.png") as image:
            assert image.size == (64, 64)
        with Image.open(output / "square.jpeg") as image:
            assert image.size == (64, 64)

    def test_width_and_filename(self, svg_path: str, tmp_path: Any) -> None:
        status = main(
            [
                svg_path,
                "-o",
                str(tmp_path),
                "-f",
                "png",
                "--width",
                "32",
                "--filename",
                "icon",
            ]
        )
        assert status == 0
        with Image.open(tmp_path / "icon.png") as image:
            assert image.size == (32, 32)

    def test_background(self, svg_path: str, tmp_path: Any) -> None:
        status = main(
            [svg_path, "-o", str(tmp_path), "-f", "png", "--background", "#00ff00"]
        )
        assert status == 0
        with Image.open(tmp_path / "square.png") as image:
            assert image.getpixel((0, 0)) == (0, 255, 0, 255)

    def test_stdin(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Any
    ) -> None:
        with open(get_fixture("square.svg"), "rb") as f:
            set_stdin(monkeypatch, f.read())
        status = main(["-", "-o", str(tmp_path), "-f", "png", "--filename", "piped"])
        assert status == 0
        assert (tmp_path / "piped.png").is_file()

    def test_stdin_requires_filename(
        self,
        monkeypatch: pytest.MonkeyPatch,
        tmp_path: Any,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        set_stdin(monkeypatch, b"")
        status = main(["-", "-o", str(tmp_path)])
        assert status == 1
        assert "'--filename' is required" in caplog.text

    def test_invalid_color(
        self, svg_path: str, tmp_path: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        status = main([svg_path, "-o", str(tmp_path), "--background", "#12345"])
        assert status == 1
        assert "Invalid color format" in caplog.text
        assert list(tmp_path.glob("square.*")) == []

    def test_missing_file(self, tmp_path: Any, caplog: pytest.LogCaptureFixture) -> None:
        status = main([str(tmp_path / "missing.svg"), "-o", str(tmp_path)])
        assert status == 1
        assert "Invalid SVG file" in caplog.text

    def test_wrong_extension(
        self, tmp_path: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "square.png"
        shutil.copy(get_fixture("square.svg"), path)
        status = main([str(path), "-o", str(tmp_path)])
        assert status == 1
        assert "Invalid SVG file" in caplog.text

    def test_unparseable_document(
        self, tmp_path: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        path = tmp_path / "broken.svg"
        path.write_text("<svg")
        status = main([str(path), "-o", str(tmp_path)])
        assert status == 1
        assert "Failed to parse SVG" in caplog.text

    def test_zero_width_is_fatal(
        self, svg_path: str, tmp_path: Any, caplog: pytest.LogCaptureFixture
    ) -> None:
        status = main([svg_path, "-o", str(tmp_path / "out"), "--width", "0"])
        assert status == 1
        assert not (tmp_path / "out").exists()

    @pytest.mark.parametrize("scale", ["inf", "nan"])
    def test_non_finite_scale_is_fatal(
        self,
        svg_path: str,
        tmp_path: Any,
        scale: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        status = main([svg_path, "-o", str(tmp_path / "out"), "--scale", scale])
        assert status == 1
        assert "Scale must be a positive finite number" in caplog.text
        assert not (tmp_path / "out").exists()

    def test_partial_failure_exits_zero(
        self,
        svg_path: str,
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        save_buffer = image_utils.save_buffer

        def failing_jpeg(filepath: str, *args: Any) -> None:
            if filepath.endswith(".jpeg"):
                raise OSError("simulated write error")
            save_buffer(filepath, *args)

        monkeypatch.setattr(image_utils, "save_buffer", failing_jpeg)
        caplog.set_level(logging.INFO)

        status = main([svg_path, "-o", str(tmp_path), "-f", "jpeg,png,tiff"])

        assert status == 0
        assert (tmp_path / "square.png").is_file()
        assert (tmp_path / "square.tiff").is_file()
        assert not (tmp_path / "square.jpeg").exists()
        assert "Failed to generate 'square.jpeg'" in caplog.text

    def test_file_size_limit(
        self,
        svg_path: str,
        tmp_path: Any,
        monkeypatch: pytest.MonkeyPatch,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        monkeypatch.setenv("SVG2RASTER_MAX_FILE_SIZE", "10")
        status = main([svg_path, "-o", str(tmp_path)])
        assert status == 1
        assert "exceeds limit" in caplog.text
