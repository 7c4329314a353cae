"""输入/输出解析：将 Source/Destination 组合解析为有序的任务计划。"""

from __future__ import annotations

import logging
import stat
from pathlib import Path
from typing import Optional

from line_drawing.core.exceptions import (
    FileSystemError,
    MultiToSingleError,
    UnknownFileNameError,
    UnknownInputFormatError,
    UnknownOutputFormatError,
)
from line_drawing.core.formats import Format, format_from_path
from line_drawing.core.models import (
    BatchPlan,
    Destination,
    PathDestination,
    PathSource,
    PlannedItem,
    Source,
    StreamDestination,
    StreamSource,
)
from line_drawing.core.scanner import scan_directory

LOGGER = logging.getLogger(__name__)


def resolve(
    source: Source,
    destination: Destination,
    input_format: Optional[Format] = None,
    output_format: Optional[Format] = None,
) -> BatchPlan:
    """解析输入输出组合，返回只读的任务计划。

    除了按需创建输出目录外没有其他副作用；所有校验都在打开任何图片流之前完成。

    Raises:
        UnknownInputFormatError: 标准输入未指定格式，或输入文件扩展名未知。
        UnknownOutputFormatError: 标准输出未指定格式，或输出文件扩展名未知。
        MultiToSingleError: 目录输入对应单个输出。
        UnknownFileNameError: 标准输入对应输出目录。
        FileSystemError: 底层文件系统错误。
    """

    if isinstance(source, StreamSource) and input_format is None:
        raise UnknownInputFormatError("从标准输入读取时必须指定输入格式")
    if isinstance(destination, StreamDestination) and output_format is None:
        raise UnknownOutputFormatError("写入标准输出时必须指定输出格式")

    input_is_dir: Optional[bool] = None
    if isinstance(source, PathSource):
        input_is_dir = _is_dir(source.path)

    output_is_dir: Optional[bool] = None
    if isinstance(destination, PathDestination):
        output_is_dir = _classify_destination(destination.path, source_is_dir=bool(input_is_dir))

    if input_is_dir and not output_is_dir:
        raise MultiToSingleError("目录输入无法写入单个输出文件或标准输出")
    if input_is_dir is None and output_is_dir:
        raise UnknownFileNameError("标准输入没有文件名，无法写入输出目录")

    if isinstance(source, PathSource) and input_is_dir:
        assert isinstance(destination, PathDestination)
        items = _plan_directory(source.path, destination.path, input_format, output_format)
    else:
        items = [_plan_single(source, destination, input_format, output_format, bool(output_is_dir))]

    LOGGER.debug("解析得到 %d 个任务", len(items))
    return BatchPlan(items=tuple(items))


def _plan_directory(
    source_dir: Path,
    output_dir: Path,
    input_format: Optional[Format],
    output_format: Optional[Format],
) -> list[PlannedItem]:
    """目录到目录：输出格式对整批任务只确定一次。"""

    try:
        entries = scan_directory(source_dir)
    except OSError as exc:
        raise FileSystemError(f"无法读取输入目录: {source_dir}") from exc

    batch_output_format = output_format or format_from_path(output_dir)

    items: list[PlannedItem] = []
    for path, detected in entries:
        items.append(
            PlannedItem(
                input_path=path,
                output_path=output_dir / path.name,
                input_format=input_format or detected,
                # 目标目录无法推断格式时沿用输入文件自身的格式
                output_format=batch_output_format or detected,
                name=path.name,
            )
        )
    return items


def _plan_single(
    source: Source,
    destination: Destination,
    input_format: Optional[Format],
    output_format: Optional[Format],
    output_is_dir: bool,
) -> PlannedItem:
    if isinstance(source, PathSource):
        input_path: Optional[Path] = source.path
        name: Optional[str] = source.path.name
        resolved_input = input_format or format_from_path(source.path)
        if resolved_input is None:
            raise UnknownInputFormatError(f"无法根据扩展名确定输入格式: {source.path}")
    else:
        input_path = None
        name = None
        resolved_input = input_format

    assert resolved_input is not None

    if isinstance(destination, StreamDestination):
        output_path: Optional[Path] = None
        resolved_output = output_format
    elif output_is_dir:
        # 仅在文件输入时可达：输出放入目录，文件名沿用输入文件名
        assert name is not None
        output_path = destination.path / name
        resolved_output = output_format or resolved_input
    else:
        output_path = destination.path
        resolved_output = output_format or format_from_path(destination.path)
        if resolved_output is None:
            raise UnknownOutputFormatError(f"无法根据扩展名确定输出格式: {destination.path}")

    assert resolved_output is not None

    return PlannedItem(
        input_path=input_path,
        output_path=output_path,
        input_format=resolved_input,
        output_format=resolved_output,
        name=name,
    )


def _is_dir(path: Path) -> bool:
    try:
        return _is_dir_strict(path)
    except OSError as exc:
        raise FileSystemError(f"无法访问路径: {path}") from exc


def _classify_destination(path: Path, *, source_is_dir: bool) -> bool:
    """判断输出路径是否为目录；不存在时按需创建目录。

    路径不存在时：若输入为目录，或路径扩展名无法识别为图片格式，则创建目录；
    否则视为尚未创建的单个输出文件。
    """

    try:
        return _is_dir_strict(path)
    except FileNotFoundError:
        if not source_is_dir and format_from_path(path) is not None:
            return False
        try:
            path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise FileSystemError(f"无法创建输出目录: {path}") from exc
        LOGGER.info("已创建输出目录: %s", path)
        return True
    except OSError as exc:
        raise FileSystemError(f"无法访问路径: {path}") from exc


def _is_dir_strict(path: Path) -> bool:
    return stat.S_ISDIR(path.stat().st_mode)
