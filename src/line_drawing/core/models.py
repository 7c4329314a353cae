"""核心数据模型定义。"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Union

from line_drawing.core.formats import Format


@dataclass(frozen=True, slots=True)
class StreamSource:
    """标准输入。"""


@dataclass(frozen=True, slots=True)
class PathSource:
    """文件或目录输入，具体类型在解析阶段确定。"""

    path: Path


@dataclass(frozen=True, slots=True)
class StreamDestination:
    """标准输出。"""


@dataclass(frozen=True, slots=True)
class PathDestination:
    """文件或目录输出。"""

    path: Path


Source = Union[StreamSource, PathSource]
Destination = Union[StreamDestination, PathDestination]


@dataclass(frozen=True, slots=True)
class PlannedItem:
    """解析得到的单个任务描述（尚未打开任何流）。

    ``input_path`` / ``output_path`` 为 None 时表示标准输入/输出。
    """

    input_path: Optional[Path]
    output_path: Optional[Path]
    input_format: Format
    output_format: Format
    name: Optional[str] = None


@dataclass(frozen=True, slots=True)
class BatchPlan:
    """一次调用的只读任务序列。"""

    items: tuple[PlannedItem, ...]

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[PlannedItem]:
        return iter(self.items)


@dataclass(slots=True)
class FileOutcome:
    """记录单个任务的处理结果（用于日志与退出码）。"""

    name: Optional[str]
    status: str
    output_path: Optional[Path] = None
    message: Optional[str] = None


@dataclass(slots=True)
class BatchResult:
    """批处理的产出。"""

    succeeded: list[FileOutcome]
    failed: list[FileOutcome]
