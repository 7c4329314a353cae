"""线稿（铅笔素描）变换。

流程：灰度 -> 反相 -> 高斯模糊 -> 颜色减淡混合 -> 色阶 -> RGBA。
各步骤均为作用于 ``uint8`` 二维数组的纯函数。
"""

from __future__ import annotations

import logging

import cv2
import numpy as np
from PIL import Image

from line_drawing.core.config import SHADOW_DEFAULT, SIGMA_DEFAULT

LOGGER = logging.getLogger(__name__)

MAX_VALUE = 255.0

# Pillow 无法直接转换为 L 的模式，先转 RGB
_RGB_FIRST_MODES = {"CMYK", "YCbCr", "LAB", "HSV"}

# 按 16 位取值范围解释的整数模式（16 位 PNG 解码后可能为 I 或 I;16）
_WIDE_INT_MODES = {"I", "I;16", "I;16B", "I;16L", "I;16N"}


def transform(image: Image.Image, sigma: float = SIGMA_DEFAULT, shadow: int = SHADOW_DEFAULT) -> Image.Image:
    """将图片转换为线稿，返回完全不透明的 RGBA 图片。

    参数不在此处校验：非正的 sigma 或超出 0~255 的 shadow 应由调用者拒绝。
    """

    base = to_luminance(image)
    blurred = gaussian_blur(invert(base), sigma)
    dodged = color_dodge(base, blurred)
    leveled = levels(dodged, shadow)
    LOGGER.debug("线稿变换完成: size=%s sigma=%s shadow=%s", image.size, sigma, shadow)
    return to_rgba(leveled)


def to_luminance(image: Image.Image) -> np.ndarray:
    """标准灰度转换，源图片的 Alpha 通道被丢弃。

    16 位整数与浮点单通道图片按比例缩放到 8 位，而不是截断。
    """

    if image.mode in _WIDE_INT_MODES:
        wide = np.clip(np.asarray(image, dtype=np.int64), 0, 65535)
        return (wide >> 8).astype(np.uint8)
    if image.mode == "F":
        floats = np.nan_to_num(np.asarray(image, dtype=np.float64))
        return np.clip(np.rint(floats * MAX_VALUE), 0, 255).astype(np.uint8)
    if image.mode in _RGB_FIRST_MODES:
        image = image.convert("RGB")
    if image.mode != "L":
        image = image.convert("L")
    return np.asarray(image, dtype=np.uint8)


def invert(layer: np.ndarray) -> np.ndarray:
    return (255 - layer).astype(np.uint8)


def gaussian_blur(layer: np.ndarray, sigma: float) -> np.ndarray:
    """高斯模糊，核大小由 sigma 推导，边缘像素按复制处理。

    在浮点域计算后四舍五入回 8 位，纯色区域保持原值不变。
    """

    blurred = cv2.GaussianBlur(
        np.ascontiguousarray(layer, dtype=np.float64),
        (0, 0),
        sigmaX=sigma,
        sigmaY=sigma,
        borderType=cv2.BORDER_REPLICATE,
    )
    return np.clip(np.rint(blurred), 0, 255).astype(np.uint8)


def color_dodge(bottom: np.ndarray, top: np.ndarray) -> np.ndarray:
    """颜色减淡：``min(1, bl / (1 - tl))``，``tl == 1`` 时结果为 1。

    归一化形式等价于 ``bottom / (255 - top)``，这里直接用整数比值计算以避免舍入漂移；
    量化时向下取整。
    """

    numerator = bottom.astype(np.float64)
    denominator = MAX_VALUE - top.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        ratio = np.where(denominator == 0, 1.0, numerator / denominator)
    ratio = np.minimum(ratio, 1.0)
    return np.floor(ratio * MAX_VALUE).astype(np.uint8)


def levels(layer: np.ndarray, shadow: int) -> np.ndarray:
    """色阶：低于阈值的部分压为黑色，其余线性拉伸到 (0, 1]。

    ``shadow == 0`` 时退化为只保留最大值。
    """

    if shadow == 0:
        return np.where(layer == 255, 255, 0).astype(np.uint8)

    values = layer.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        stretched = (values - shadow) / (MAX_VALUE - shadow)
    result = np.where(values <= shadow, 0.0, stretched)
    return np.floor(result * MAX_VALUE).astype(np.uint8)


def to_rgba(layer: np.ndarray) -> Image.Image:
    """单通道扩展为 RGB + 不透明 Alpha。"""

    return Image.fromarray(np.ascontiguousarray(layer)).convert("RGBA")
