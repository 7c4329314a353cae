"""格式注册表与目录扫描测试。"""

from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from line_drawing.core.exceptions import UnsupportedFormatError
from line_drawing.core.formats import (
    SUPPORTED_EXTENSIONS,
    Format,
    detect_format,
    format_from_path,
    parse_format_hint,
)
from line_drawing.core.scanner import scan_directory

EXPECTED = {
    "jpg": Format.JPEG,
    "jpeg": Format.JPEG,
    "png": Format.PNG,
    "gif": Format.GIF,
    "webp": Format.WEBP,
    "tif": Format.TIFF,
    "tiff": Format.TIFF,
    "tga": Format.TGA,
    "bmp": Format.BMP,
    "ico": Format.ICO,
    "hdr": Format.HDR,
    "pbm": Format.PNM,
    "pam": Format.PNM,
    "ppm": Format.PNM,
    "pgm": Format.PNM,
}


@pytest.mark.parametrize("extension, expected", sorted(EXPECTED.items()))
def test_detect_format_known_extensions(extension: str, expected: Format) -> None:
    assert detect_format(extension) is expected


@pytest.mark.parametrize("extension", ["txt", "", "svg", "jpe", "heic", "JPG", ".png"])
def test_detect_format_unknown_extensions(extension: str) -> None:
    # 大小写归一化由调用者负责，因此大写扩展名也视为未知。
    assert detect_format(extension) is None


def test_supported_extensions_match_registry() -> None:
    assert SUPPORTED_EXTENSIONS == frozenset(EXPECTED)


def test_format_from_path_is_case_insensitive() -> None:
    assert format_from_path(Path("photo.JPG")) is Format.JPEG
    assert format_from_path(Path("scan.Tiff")) is Format.TIFF
    assert format_from_path(Path("README")) is None
    assert format_from_path(Path("archive.tar.gz")) is None


def test_parse_format_hint_accepts_dot_and_case() -> None:
    assert parse_format_hint(".PNG") is Format.PNG
    assert parse_format_hint(" pgm ") is Format.PNM

    with pytest.raises(UnsupportedFormatError) as excinfo:
        parse_format_hint("xyz")
    assert excinfo.value.kind == "unsupported-format"


def test_scan_directory_filters_and_sorts(tmp_path: Path) -> None:
    Image.new("RGB", (4, 4), "red").save(tmp_path / "b.jpg")
    Image.new("RGB", (4, 4), "blue").save(tmp_path / "A.png")
    (tmp_path / "c.txt").write_text("hello")
    (tmp_path / "nested.png").mkdir()
    (tmp_path / "nested.png" / "inner.png").write_bytes(b"")

    entries = scan_directory(tmp_path)

    assert [(path.name, fmt) for path, fmt in entries] == [
        ("A.png", Format.PNG),
        ("b.jpg", Format.JPEG),
    ]


def test_scan_directory_empty(tmp_path: Path) -> None:
    assert scan_directory(tmp_path) == []
