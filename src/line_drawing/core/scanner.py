"""目录扫描与筛选逻辑。"""

from __future__ import annotations

import logging
from pathlib import Path

from line_drawing.core.formats import Format, format_from_path

LOGGER = logging.getLogger(__name__)


def scan_directory(path: Path) -> list[tuple[Path, Format]]:
    """列出目录下（不递归）扩展名可识别的文件及其格式。

    子目录与未知扩展名的文件会被静默跳过。OSError 原样抛出，由调用者包装。
    """

    collected: list[tuple[Path, Format]] = []
    for candidate in path.iterdir():
        if candidate.is_dir():
            continue

        detected = format_from_path(candidate)
        if detected is None:
            LOGGER.debug("跳过不支持的文件: %s", candidate.name)
            continue

        collected.append((candidate, detected))

    collected.sort(key=lambda x: x[0].name.lower())
    return collected
