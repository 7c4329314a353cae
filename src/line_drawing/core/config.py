"""处理任务的配置模型。"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from line_drawing.core.exceptions import InvalidConfigurationError
from line_drawing.core.formats import Format
from line_drawing.core.models import Destination, Source, StreamDestination, StreamSource

SIGMA_DEFAULT = 1.8
SHADOW_DEFAULT = 150


@dataclass(slots=True)
class TransformConfig:
    """线稿算法的两个数值参数。"""

    sigma: float = SIGMA_DEFAULT  # 高斯模糊标准差
    shadow: int = SHADOW_DEFAULT  # 色阶阴影阈值 0~255

    def validate(self) -> None:
        """校验参数范围，算法本身不做校验。"""

        if not math.isfinite(self.sigma) or self.sigma <= 0:
            raise InvalidConfigurationError(f"sigma 必须为正数: {self.sigma}")
        if not 0 <= self.shadow <= 255:
            raise InvalidConfigurationError(f"shadow 必须位于 0~255: {self.shadow}")


@dataclass(slots=True)
class JobConfig:
    """单次批处理任务的配置集合。"""

    source: Source = field(default_factory=StreamSource)
    destination: Destination = field(default_factory=StreamDestination)
    input_format: Optional[Format] = None
    output_format: Optional[Format] = None
    transform: TransformConfig = field(default_factory=TransformConfig)
    keep_going: bool = False
    quiet: bool = False
