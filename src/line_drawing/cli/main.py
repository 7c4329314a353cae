"""命令行入口。"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from line_drawing.core.config import SHADOW_DEFAULT, SIGMA_DEFAULT, JobConfig, TransformConfig
from line_drawing.core.exceptions import LineDrawingError, UnsupportedFormatError
from line_drawing.core.formats import Format, parse_format_hint
from line_drawing.core.models import (
    Destination,
    PathDestination,
    PathSource,
    Source,
    StreamDestination,
    StreamSource,
)
from line_drawing.core.progress import ProgressUpdate
from line_drawing.processing.pipeline import process_batch
from line_drawing.utils.logging import setup_logging

app = typer.Typer(help="将图片转换为线稿（铅笔素描）风格。", add_completion=False)

STDIO_MARKER = "-"


def _parse_source(value: Optional[str]) -> Source:
    if value is None or value == STDIO_MARKER:
        return StreamSource()
    return PathSource(Path(value).expanduser())


def _parse_destination(value: Optional[str]) -> Destination:
    if value is None or value == STDIO_MARKER:
        return StreamDestination()
    return PathDestination(Path(value).expanduser())


def _parse_format(value: Optional[str], option_name: str) -> Optional[Format]:
    if value is None:
        return None
    try:
        return parse_format_hint(value)
    except UnsupportedFormatError as exc:
        raise typer.BadParameter(str(exc), param_hint=option_name) from exc


def _build_progress_callback(progress: Progress):
    task_id: Optional[int] = None

    def callback(update: ProgressUpdate) -> None:
        nonlocal task_id
        if update.total == 0:
            return
        if task_id is None:
            task_id = progress.add_task("处理图片", total=update.total)
        progress.update(task_id, completed=update.completed, description=update.name or "处理图片")

    return callback


@app.command()
def run_cli(  # noqa: PLR0913
    input_path: Optional[str] = typer.Option(
        None, "--input", "-i", help='输入文件或目录；省略或为 "-" 时读取标准输入'
    ),
    output_path: Optional[str] = typer.Option(
        None, "--output", "-o", help='输出文件或目录；省略或为 "-" 时写入标准输出'
    ),
    input_format: Optional[str] = typer.Option(None, "--if", help="输入格式，读取标准输入时必填"),
    output_format: Optional[str] = typer.Option(None, "--of", help="输出格式，写入标准输出时必填"),
    sigma: float = typer.Option(SIGMA_DEFAULT, "--sigma", "-s", help="高斯模糊标准差，必须大于 0"),
    shadow: int = typer.Option(SHADOW_DEFAULT, "--shadow", min=0, max=255, help="色阶阴影阈值 0~255"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="不输出逐个文件名与进度"),
    keep_going: bool = typer.Option(False, "--keep-going", "-k", help="单个文件失败后继续处理其余文件"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="输出调试日志"),
) -> None:
    """将图片转换为线稿。"""

    setup_logging(logging.DEBUG if verbose else logging.INFO)

    if sigma <= 0:
        raise typer.BadParameter("sigma 必须大于 0", param_hint="--sigma")

    job = JobConfig(
        source=_parse_source(input_path),
        destination=_parse_destination(output_path),
        input_format=_parse_format(input_format, "--if"),
        output_format=_parse_format(output_format, "--of"),
        transform=TransformConfig(sigma=sigma, shadow=shadow),
        keep_going=keep_going,
        quiet=quiet,
    )
    logging.getLogger(__name__).debug("CLI 参数解析完成: %s", job)

    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TimeElapsedColumn(),
        console=Console(stderr=True),
        disable=quiet,
    )

    try:
        with progress:
            result = process_batch(
                job,
                stdin=sys.stdin.buffer,
                stdout=sys.stdout.buffer,
                progress_callback=_build_progress_callback(progress),
            )
    except LineDrawingError as exc:
        typer.echo(exc.describe(), err=True)
        raise typer.Exit(code=1) from exc

    if result.failed:
        typer.echo(f"处理完成：成功 {len(result.succeeded)} 个，失败 {len(result.failed)} 个。", err=True)
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
