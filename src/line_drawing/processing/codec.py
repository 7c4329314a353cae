"""图片解码与编码。

大部分格式交给 Pillow；HDR 与 PNM 家族（含 PAM）由 OpenCV 处理。
"""

from __future__ import annotations

import io
import logging

import cv2
import numpy as np
from PIL import Image, UnidentifiedImageError

from line_drawing.core.exceptions import LineDrawingError
from line_drawing.core.formats import Format

LOGGER = logging.getLogger(__name__)

PILLOW_FORMATS = {
    Format.JPEG: "JPEG",
    Format.PNG: "PNG",
    Format.GIF: "GIF",
    Format.WEBP: "WEBP",
    Format.TIFF: "TIFF",
    Format.TGA: "TGA",
    Format.BMP: "BMP",
    Format.ICO: "ICO",
}

# 编码时 Pillow 使用的插件名；PNM 统一写为二进制 PPM
PILLOW_SAVE_FORMATS = {**PILLOW_FORMATS, Format.PNM: "PPM"}

# 不支持 Alpha 的目标格式
RGB_ONLY_FORMATS = {Format.JPEG, Format.PNM, Format.HDR}

ICO_MAX_SIZE = 256

OPENCV_SIGNATURES = {
    Format.HDR: (b"#?",),
    Format.PNM: tuple(f"P{idx}".encode("ascii") for idx in range(1, 8)),
}


class ImageDecodeError(LineDrawingError):
    """图片解码失败。"""

    kind = "decode"


class ImageEncodeError(LineDrawingError):
    """图片编码失败。"""

    kind = "encode"


def decode_image(data: bytes, fmt: Format) -> Image.Image:
    """按给定格式解码整张图片，返回新的 Image 对象。"""

    if fmt in OPENCV_SIGNATURES:
        return _decode_with_opencv(data, fmt)

    try:
        with Image.open(io.BytesIO(data), formats=[PILLOW_FORMATS[fmt]]) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as exc:
        LOGGER.debug("无法按 %s 解码: %s", fmt.name, exc)
        raise ImageDecodeError(f"无法按 {fmt.name} 格式解码图片") from exc


def encode_image(image: Image.Image, fmt: Format) -> bytes:
    """将图片编码为指定格式的字节串。"""

    if fmt in RGB_ONLY_FORMATS and image.mode != "RGB":
        image = image.convert("RGB")

    if fmt is Format.HDR:
        return _encode_hdr(image)

    save_params = {}
    if fmt is Format.ICO:
        if image.width > ICO_MAX_SIZE or image.height > ICO_MAX_SIZE:
            raise ImageEncodeError(f"ICO 尺寸不能超过 {ICO_MAX_SIZE}px: {image.size}")
        # 只写入原尺寸，避免 Pillow 默认的多尺寸缩放
        save_params["sizes"] = [image.size]

    buffer = io.BytesIO()
    try:
        image.save(buffer, format=PILLOW_SAVE_FORMATS[fmt], **save_params)
    except (OSError, ValueError, KeyError) as exc:
        raise ImageEncodeError(f"无法编码为 {fmt.name} 格式") from exc
    return buffer.getvalue()


def _decode_with_opencv(data: bytes, fmt: Format) -> Image.Image:
    if not data.startswith(OPENCV_SIGNATURES[fmt]):
        raise ImageDecodeError(f"数据不是有效的 {fmt.name} 图片")

    try:
        decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
    except cv2.error as exc:
        raise ImageDecodeError(f"无法按 {fmt.name} 格式解码图片") from exc
    if decoded is None:
        raise ImageDecodeError(f"无法按 {fmt.name} 格式解码图片")

    rgb = cv2.cvtColor(_to_uint8(decoded), cv2.COLOR_BGR2RGB)
    return Image.fromarray(rgb)


def _encode_hdr(image: Image.Image) -> bytes:
    rgb = np.asarray(image, dtype=np.float32) / 255.0
    try:
        ok, encoded = cv2.imencode(".hdr", cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))
    except cv2.error as exc:
        raise ImageEncodeError("无法编码为 HDR 格式") from exc
    if not ok:
        raise ImageEncodeError("无法编码为 HDR 格式")
    return encoded.tobytes()


def _to_uint8(array: np.ndarray) -> np.ndarray:
    """OpenCV 可能返回 16 位或浮点数据，统一转为 8 位。"""

    if array.dtype == np.uint8:
        return array
    if array.dtype == np.uint16:
        return (array >> 8).astype(np.uint8)
    return np.clip(array * 255.0, 0, 255).astype(np.uint8)
