"""图片格式注册表：扩展名 -> 编解码格式。"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

from line_drawing.core.exceptions import UnsupportedFormatError


class Format(Enum):
    """支持的编解码格式。"""

    JPEG = "jpeg"
    PNG = "png"
    GIF = "gif"
    WEBP = "webp"
    TIFF = "tiff"
    TGA = "tga"
    BMP = "bmp"
    ICO = "ico"
    HDR = "hdr"
    PNM = "pnm"  # pbm / pgm / ppm / pam


_EXTENSION_MAP = {
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

SUPPORTED_EXTENSIONS = frozenset(_EXTENSION_MAP)


def detect_format(extension: str) -> Optional[Format]:
    """根据小写扩展名（不含点）返回格式，未知扩展名返回 None。

    大小写归一化由调用者负责。
    """

    return _EXTENSION_MAP.get(extension)


def format_from_path(path: Path) -> Optional[Format]:
    """从路径后缀推断格式；目录扫描与单文件解析共用此函数。"""

    suffix = path.suffix.lower()
    if not suffix:
        return None
    return detect_format(suffix[1:])


def parse_format_hint(value: str) -> Format:
    """解析命令行传入的格式字符串，例如 ``png``、``.JPG``。"""

    normalized = value.strip().lower().lstrip(".")
    detected = detect_format(normalized)
    if detected is None:
        raise UnsupportedFormatError(f"不支持的格式: {value}")
    return detected
