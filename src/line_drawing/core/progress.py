"""进度更新的数据模型。"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class ProgressUpdate:
    """批处理过程中逐个任务的进度信息。"""

    total: int
    completed: int
    name: Optional[str] = None  # 标准输入时为 None
    status: str = "running"  # running | processed | failed | done
