"""线稿变换算法测试。"""

from __future__ import annotations

import io

import numpy as np
from PIL import Image

from line_drawing.core.formats import Format
from line_drawing.processing.codec import decode_image, encode_image
from line_drawing.processing.sketch import (
    color_dodge,
    gaussian_blur,
    invert,
    levels,
    to_luminance,
    to_rgba,
    transform,
)


def _layer(*values: int) -> np.ndarray:
    return np.array([values], dtype=np.uint8)


def test_invert() -> None:
    assert invert(_layer(0, 100, 255)).tolist() == [[255, 155, 0]]


def test_color_dodge_full_top_is_white() -> None:
    assert color_dodge(_layer(128), _layer(255)).tolist() == [[255]]
    # 底层为 0 时同样走 tl == 1 分支。
    assert color_dodge(_layer(0), _layer(255)).tolist() == [[255]]


def test_color_dodge_within_range() -> None:
    result = int(color_dodge(_layer(64), _layer(128))[0, 0])
    expected = (64 / 255) / (1 - 128 / 255) * 255

    assert abs(result - expected) <= 1
    assert result == 128


def test_color_dodge_clamps_to_max() -> None:
    assert color_dodge(_layer(200), _layer(100)).tolist() == [[255]]


def test_levels_zero_shadow_keeps_only_ceiling() -> None:
    result = levels(_layer(0, 1, 128, 254, 255), 0)
    assert result.tolist() == [[0, 0, 0, 0, 255]]


def test_levels_default_shadow() -> None:
    result = levels(_layer(0, 100, 150, 200, 255), 150)

    assert result.tolist() == [[0, 0, 0, int((200 - 150) / (255 - 150) * 255), 255]]
    assert result[0, 3] == 121


def test_levels_full_shadow_is_black() -> None:
    assert levels(_layer(0, 200, 255), 255).tolist() == [[0, 0, 0]]


def test_gaussian_blur_keeps_flat_regions() -> None:
    flat = np.full((5, 7), 127, dtype=np.uint8)
    assert np.array_equal(gaussian_blur(flat, 1.8), flat)
    # 极小的 sigma 近似不做任何处理。
    ramp = np.arange(0, 250, 10, dtype=np.uint8).reshape(5, 5)
    assert np.array_equal(gaussian_blur(ramp, 0.01), ramp)


def test_to_luminance_drops_alpha() -> None:
    image = Image.new("RGBA", (3, 3), (10, 200, 30, 0))
    layer = to_luminance(image)

    assert layer.shape == (3, 3)
    assert layer.dtype == np.uint8
    assert int(layer[0, 0]) == Image.new("RGB", (1, 1), (10, 200, 30)).convert("L").getpixel((0, 0))


def test_to_rgba_is_opaque() -> None:
    image = to_rgba(_layer(0, 77, 255))

    assert image.mode == "RGBA"
    assert list(image.getdata()) == [(0, 0, 0, 255), (77, 77, 77, 255), (255, 255, 255, 255)]


def test_solid_gray_png_golden_output() -> None:
    buffer = io.BytesIO()
    Image.new("RGB", (2, 2), (128, 128, 128)).save(buffer, format="PNG")

    decoded = decode_image(buffer.getvalue(), Format.PNG)
    result = transform(decoded)

    assert result.mode == "RGBA"
    assert result.size == (2, 2)
    # 纯色图片模糊后不变，减淡比值恰为 1，色阶后为纯白。
    assert list(result.getdata()) == [(255, 255, 255, 255)] * 4

    roundtrip = decode_image(encode_image(result, Format.PNG), Format.PNG)
    assert list(roundtrip.convert("RGBA").getdata()) == [(255, 255, 255, 255)] * 4


def test_transform_discards_source_alpha() -> None:
    image = Image.new("RGBA", (6, 4), (90, 90, 90, 0))

    result = transform(image)

    assert result.size == (6, 4)
    assert {pixel[3] for pixel in result.getdata()} == {255}


def test_transform_is_not_idempotent() -> None:
    rng = np.random.default_rng(0)
    noise = Image.fromarray(rng.integers(0, 256, size=(32, 32), dtype=np.uint8))

    once = transform(noise)
    twice = transform(once)

    assert np.asarray(once).shape == (32, 32, 4)
    assert not np.array_equal(np.asarray(once), np.asarray(twice))


def test_transform_draws_lines_at_edges() -> None:
    array = np.full((16, 16), 255, dtype=np.uint8)
    array[:, :8] = 0
    image = Image.fromarray(array)

    result = np.asarray(transform(image).convert("L"))

    # 暗区内部与亮区都变为白色，暗区靠近边缘处出现黑色线条。
    assert result[8, 0] == 255
    assert result[8, 15] == 255
    assert result[8, 7] == 0


def test_to_luminance_scales_sixteen_bit_png() -> None:
    buffer = io.BytesIO()
    Image.fromarray(np.full((4, 4), 128 * 257, dtype=np.uint16)).save(buffer, format="PNG")

    decoded = decode_image(buffer.getvalue(), Format.PNG)

    assert to_luminance(decoded).tolist() == [[128] * 4] * 4


def test_to_luminance_scales_float_tiff() -> None:
    buffer = io.BytesIO()
    Image.fromarray(np.full((3, 3), 0.5, dtype=np.float32)).save(buffer, format="TIFF")

    decoded = decode_image(buffer.getvalue(), Format.TIFF)

    assert decoded.mode == "F"
    assert to_luminance(decoded).tolist() == [[128] * 3] * 3


def test_to_luminance_keeps_full_range_of_wide_images() -> None:
    array = np.array([[0, 255, 65535]], dtype=np.uint16)

    assert to_luminance(Image.fromarray(array)).tolist() == [[0, 0, 255]]
