"""项目内使用的自定义异常定义。

每个异常类携带一个简短的 ``kind`` 字符串，命令行据此输出 ``<kind>: <message>``。
"""

from __future__ import annotations


class LineDrawingError(Exception):
    """基础异常类型。"""

    kind = "error"

    def describe(self) -> str:
        """返回带错误类别前缀的单行描述。"""

        return f"{self.kind}: {self}"


class InvalidConfigurationError(LineDrawingError):
    """参数（sigma / shadow 等）不合法时抛出。"""

    kind = "invalid-parameter"


class UnsupportedFormatError(LineDrawingError):
    """格式字符串无法识别。"""

    kind = "unsupported-format"


class ResolutionError(LineDrawingError):
    """输入/输出解析阶段的错误，发生在任何编解码之前。"""


class UnknownInputFormatError(ResolutionError):
    """无法确定输入格式（标准输入未指定格式，或文件扩展名未知）。"""

    kind = "unknown-input-format"


class UnknownOutputFormatError(ResolutionError):
    """无法确定输出格式。"""

    kind = "unknown-output-format"


class MultiToSingleError(ResolutionError):
    """目录输入不能写入单个输出文件或标准输出。"""

    kind = "multi-to-single"


class UnknownFileNameError(ResolutionError):
    """标准输入没有文件名，无法放入输出目录。"""

    kind = "unknown-file-name"


class FileSystemError(ResolutionError):
    """解析阶段的文件系统错误，原始 OSError 通过 ``__cause__`` 保留。"""

    kind = "io"


class ItemIOError(LineDrawingError):
    """单个任务的输入或输出打开/读写失败，``side`` 为 ``input`` 或 ``output``。"""

    def __init__(self, side: str, message: str) -> None:
        super().__init__(message)
        self.side = side

    @property
    def kind(self) -> str:  # type: ignore[override]
        return f"{self.side}-io"
