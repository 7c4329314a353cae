"""单个任务的处理单元：解码 -> 线稿变换 -> 编码 -> 写出。"""

from __future__ import annotations

import logging
from typing import Optional

from PIL import Image

from line_drawing.core.config import TransformConfig
from line_drawing.core.exceptions import ItemIOError
from line_drawing.core.streams import WorkItem
from line_drawing.processing.codec import decode_image, encode_image
from line_drawing.processing.sketch import transform

LOGGER = logging.getLogger(__name__)


def run_item(item: WorkItem, config: TransformConfig) -> int:
    """处理一个已打开的任务，返回写出的字节数。

    解码/编码失败抛出 ``ImageDecodeError`` / ``ImageEncodeError``，
    读写失败抛出 ``ItemIOError``；句柄由调用者负责关闭。
    """

    try:
        data = item.input.read()
    except OSError as exc:
        raise ItemIOError("input", f"读取输入失败: {exc}") from exc

    image: Optional[Image.Image] = None
    sketch: Optional[Image.Image] = None
    try:
        image = decode_image(data, item.input_format)
        sketch = transform(image, sigma=config.sigma, shadow=config.shadow)
        encoded = encode_image(sketch, item.output_format)
    finally:
        _close_if_needed(image, sketch)

    try:
        written = item.output.write(encoded)
        item.output.flush()
    except OSError as exc:
        raise ItemIOError("output", f"写入输出失败: {exc}") from exc
    LOGGER.debug("写出 %d 字节 (%s -> %s)", len(encoded), item.input_format.name, item.output_format.name)
    return written if written is not None else len(encoded)


def _close_if_needed(*images: Optional[Image.Image]) -> None:
    for img in images:
        if img is not None:
            img.close()
