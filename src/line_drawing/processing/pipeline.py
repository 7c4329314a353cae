"""处理流水线：解析任务计划并逐个顺序执行。"""

from __future__ import annotations

import io
import logging
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional, Union

from line_drawing.core.config import SHADOW_DEFAULT, SIGMA_DEFAULT, JobConfig, TransformConfig
from line_drawing.core.exceptions import ItemIOError, LineDrawingError
from line_drawing.core.formats import Format, parse_format_hint
from line_drawing.core.models import BatchPlan, BatchResult, FileOutcome, PlannedItem
from line_drawing.core.progress import ProgressUpdate
from line_drawing.core.resolver import resolve
from line_drawing.core.streams import (
    InputHandle,
    InputKind,
    OutputHandle,
    OutputKind,
    WorkItem,
    open_input,
    open_output,
)
from line_drawing.processing.worker import run_item

LOGGER = logging.getLogger(__name__)


ProgressCallback = Optional[Callable[[ProgressUpdate], None]]


@contextmanager
def open_work_item(planned: PlannedItem, *, stdin: BinaryIO, stdout: BinaryIO) -> Iterator[WorkItem]:
    """打开单个任务的输入与输出，退出时无论成败都会刷新并关闭句柄。

    输出文件在此处创建（或截断），早于解码；解码失败时会留下空文件。
    """

    try:
        input_handle = open_input(planned.input_path, stdin)
    except OSError as exc:
        raise ItemIOError("input", f"无法打开输入 {_describe_path(planned.input_path, '<stdin>')}: {exc}") from exc

    try:
        output_handle = open_output(planned.output_path, stdout)
    except OSError as exc:
        input_handle.close()
        raise ItemIOError("output", f"无法打开输出 {_describe_path(planned.output_path, '<stdout>')}: {exc}") from exc

    try:
        yield WorkItem(
            input=input_handle,
            output=output_handle,
            input_format=planned.input_format,
            output_format=planned.output_format,
            name=planned.name,
        )
    finally:
        _release(input_handle, output_handle)


def iter_work_items(plan: BatchPlan, *, stdin: BinaryIO, stdout: BinaryIO) -> Iterator[WorkItem]:
    """按计划顺序逐个打开任务；上一个任务的句柄关闭后才会打开下一个。

    序列有限且不可重启，打开失败时异常向上传播并结束序列。
    这是对外的逐个拉取接口；``process_batch`` 直接使用 ``open_work_item``，
    以便在 keep-going 模式下捕获单个任务的打开错误后继续。
    """

    for planned in plan:
        with open_work_item(planned, stdin=stdin, stdout=stdout) as item:
            yield item


def process_batch(
    config: JobConfig,
    *,
    stdin: Optional[BinaryIO] = None,
    stdout: Optional[BinaryIO] = None,
    progress_callback: ProgressCallback = None,
) -> BatchResult:
    """批量处理入口：解析计划后逐个执行 解码 -> 线稿 -> 编码。

    默认遇到第一个错误即中止并抛出；``keep_going`` 为 True 时记录失败并继续。
    解析阶段的错误总是直接抛出。
    每个任务通过 ``open_work_item`` 打开，与 ``iter_work_items`` 的打开与释放顺序一致。
    """

    config.transform.validate()
    stdin = stdin if stdin is not None else sys.stdin.buffer
    stdout = stdout if stdout is not None else sys.stdout.buffer

    plan = resolve(config.source, config.destination, config.input_format, config.output_format)
    total = len(plan)
    LOGGER.info("共 %d 个待处理任务", total)

    successes: list[FileOutcome] = []
    failed: list[FileOutcome] = []

    if total == 0:
        _emit_progress(progress_callback, completed=0, total=0, status="done")
        return BatchResult(succeeded=successes, failed=failed)

    for completed, planned in enumerate(plan):
        label = planned.name or "<stdin>"
        if not config.quiet:
            LOGGER.info("%s", label)
        _emit_progress(progress_callback, completed, total, planned.name)

        try:
            with open_work_item(planned, stdin=stdin, stdout=stdout) as item:
                run_item(item, config.transform)
        except LineDrawingError as exc:
            LOGGER.error("处理失败 %s: %s", label, exc.describe())
            if not config.keep_going:
                raise
            failed.append(
                FileOutcome(
                    name=planned.name,
                    status=f"error-{exc.kind}",
                    output_path=planned.output_path,
                    message=str(exc),
                )
            )
            _emit_progress(progress_callback, completed + 1, total, planned.name, status="failed")
            continue

        successes.append(FileOutcome(name=planned.name, status="processed", output_path=planned.output_path))
        _emit_progress(progress_callback, completed + 1, total, planned.name, status="processed")

    _emit_progress(progress_callback, total, total, status="done")
    return BatchResult(succeeded=successes, failed=failed)


def convert_stream(
    reader: BinaryIO,
    writer: BinaryIO,
    input_format: Union[Format, str],
    output_format: Union[Format, str],
    *,
    sigma: float = SIGMA_DEFAULT,
    shadow: int = SHADOW_DEFAULT,
) -> None:
    """对单个流执行转换；格式可以是 ``Format`` 或扩展名字符串。

    ``writer`` 由调用者持有，这里只刷新不关闭。
    """

    config = TransformConfig(sigma=sigma, shadow=shadow)
    config.validate()
    resolved_input = _coerce_format(input_format)
    resolved_output = _coerce_format(output_format)

    item = WorkItem(
        input=InputHandle(InputKind.BUFFER, io.BytesIO(reader.read())),
        output=OutputHandle(OutputKind.STREAM, writer),
        input_format=resolved_input,
        output_format=resolved_output,
    )
    try:
        run_item(item, config)
    finally:
        _release(item.input, item.output)


def _release(input_handle: InputHandle, output_handle: OutputHandle) -> None:
    try:
        output_handle.close()
    except OSError as exc:
        raise ItemIOError("output", f"关闭输出失败: {exc}") from exc
    finally:
        input_handle.close()


def _coerce_format(value: Union[Format, str]) -> Format:
    if isinstance(value, Format):
        return value
    return parse_format_hint(value)


def _describe_path(path: Optional[Path], fallback: str) -> str:
    return str(path) if path is not None else fallback


def _emit_progress(
    callback: ProgressCallback,
    completed: int,
    total: int,
    name: Optional[str] = None,
    status: str = "running",
) -> None:
    if not callback:
        return
    callback(ProgressUpdate(total=total, completed=completed, name=name, status=status))
