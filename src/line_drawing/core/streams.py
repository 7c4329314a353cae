"""单个任务的输入/输出句柄。

输入要么是读入内存的标准输入，要么是文件；输出要么是标准输出，要么是文件。
两者都是封闭的少量变体，用 ``kind`` 字段区分，对外提供统一的读写接口。
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import BinaryIO, Optional

from line_drawing.core.formats import Format

LOGGER = logging.getLogger(__name__)


class InputKind(Enum):
    BUFFER = "buffer"
    FILE = "file"


class OutputKind(Enum):
    STREAM = "stream"
    FILE = "file"


class InputHandle:
    """可读、可定位的输入句柄。"""

    def __init__(self, kind: InputKind, stream: BinaryIO) -> None:
        self.kind = kind
        self._stream = stream

    def read(self, size: int = -1) -> bytes:
        return self._stream.read(size)

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        return self._stream.seek(offset, whence)

    @property
    def closed(self) -> bool:
        return self._stream.closed

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "InputHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


class OutputHandle:
    """可写的输出句柄；STREAM（如标准输出）由调用者持有，关闭时只刷新不关闭。"""

    def __init__(self, kind: OutputKind, stream: BinaryIO) -> None:
        self.kind = kind
        self._stream = stream
        self._closed = False

    def write(self, data: bytes) -> int:
        return self._stream.write(data)

    def flush(self) -> None:
        self._stream.flush()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.kind is OutputKind.STREAM:
            self._stream.flush()
        else:
            # BufferedWriter.close() 会先 flush
            self._stream.close()

    def __enter__(self) -> "OutputHandle":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def open_input(path: Optional[Path], stdin: BinaryIO) -> InputHandle:
    """打开输入；``path`` 为 None 时一次性读入全部标准输入。"""

    if path is None:
        data = stdin.read()
        LOGGER.debug("从标准输入读取 %d 字节", len(data))
        return InputHandle(InputKind.BUFFER, io.BytesIO(data))
    return InputHandle(InputKind.FILE, path.open("rb"))


def open_output(path: Optional[Path], stdout: BinaryIO) -> OutputHandle:
    """打开输出；文件已存在时会被截断。"""

    if path is None:
        return OutputHandle(OutputKind.STREAM, stdout)
    return OutputHandle(OutputKind.FILE, path.open("wb"))


@dataclass(slots=True)
class WorkItem:
    """驱动器逐个产出的已打开任务，句柄只在本次迭代内有效。"""

    input: InputHandle
    output: OutputHandle
    input_format: Format
    output_format: Format
    name: Optional[str] = None
