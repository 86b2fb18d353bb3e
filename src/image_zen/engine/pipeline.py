"""流水线模块。

PipelineSequencer 按顺序执行阶段，每个阶段的输出作为下一个阶段的输入。
状态机：PENDING → RUNNING(i) → COMPLETED | FAILED(i, cause)。
任一阶段失败时整个流水线失败，不返回部分结果，也不重试。
"""

import time
from collections.abc import Iterable, Sequence
from typing import Any

from ..config import ZenOptions
from ..core.background import BackgroundRemover
from ..core.compressor import ImageCompressor
from ..core.upscaler import ImageUpscaler
from ..exceptions import ProcessingError, UnknownTaskError
from ..models.image_buffer import ImageBuffer
from ..models.results import PipelineState, PipelineStatus
from ..models.stages import (
    Compress,
    RemoveBackground,
    StageKind,
    UnknownStage,
    Upscale,
)
from ..utils.logging_helpers import get_logger
from ..utils.message_formatter import MessageFormatter


logger = get_logger()

Stage = RemoveBackground | Upscale | Compress | UnknownStage


class PipelineSequencer:
    """阶段执行器

    处理器通过构造函数注入，未提供时按运行选项创建默认实例。
    """

    def __init__(
        self,
        options: ZenOptions | None = None,
        remover: BackgroundRemover | None = None,
        upscaler: ImageUpscaler | None = None,
        compressor: ImageCompressor | None = None,
    ):
        self.options = options or ZenOptions()
        self.remover = remover or BackgroundRemover(self.options)
        self.upscaler = upscaler or ImageUpscaler(self.options)
        self.compressor = compressor or ImageCompressor(self.options)
        self.state = PipelineState()

    def execute(self, image: ImageBuffer, stages: Sequence[Stage]) -> ImageBuffer:
        """依次执行所有阶段

        Args:
            image: 初始图像
            stages: 阶段列表，空列表时原样返回输入

        Raises:
            UnknownTaskError: 执行到未识别的阶段时
            ProcessingError: 任一阶段失败时，携带阶段名和序号
        """
        self.state = PipelineState(status=PipelineStatus.PENDING)
        current = image

        if self.options.verbose:
            logger.info(f"执行流水线，共 {len(stages)} 个阶段")

        for index, stage in enumerate(stages):
            self.state = PipelineState(status=PipelineStatus.RUNNING, stage_index=index)
            started = time.perf_counter()

            try:
                current = self._dispatch(stage, current, index)
            except UnknownTaskError as e:
                self._fail(index, e.message)
                raise
            except Exception as e:
                cause = e.message if isinstance(e, ProcessingError) else str(e)
                self._fail(index, cause)
                raise ProcessingError(
                    MessageFormatter.stage_failed(stage.name, cause),
                    stage=stage.name,
                    stage_index=index,
                ) from e

            if self.options.verbose:
                elapsed_ms = (time.perf_counter() - started) * 1000
                logger.info(f"  {index + 1}. {stage.name} 完成，耗时 {elapsed_ms:.0f}ms")

        self.state = PipelineState(
            status=PipelineStatus.COMPLETED,
            stage_index=len(stages) - 1 if stages else None,
        )
        return current

    def _dispatch(self, stage: Stage, current: ImageBuffer, index: int) -> ImageBuffer:
        match stage:
            case RemoveBackground(options=options):
                return self.remover.apply(current, options)
            case Upscale(scale=scale, options=options):
                return self.upscaler.apply(current, scale, options)
            case Compress(options=options):
                return self.compressor.apply(current, options)
            case UnknownStage(tag=tag):
                raise UnknownTaskError(tag, index)

    def _fail(self, index: int, cause: str) -> None:
        self.state = PipelineState(
            status=PipelineStatus.FAILED, stage_index=index, cause=cause
        )
        logger.error(f"流水线在第 {index + 1} 个阶段失败: {cause}")


class Pipeline:
    """流水线构建器

    支持链式调用：Pipeline().add(Upscale(scale=2)).add(Compress())
    """

    def __init__(
        self,
        options: ZenOptions | None = None,
        sequencer: PipelineSequencer | None = None,
        stages: Iterable[Stage] = (),
    ):
        self.options = options or ZenOptions()
        self.sequencer = sequencer or PipelineSequencer(self.options)
        self.stages: list[Stage] = list(stages)

    def __len__(self) -> int:
        return len(self.stages)

    def add(self, stage: Stage) -> "Pipeline":
        """追加阶段"""
        self.stages.append(stage)
        return self

    def insert(self, index: int, stage: Stage) -> "Pipeline":
        """在指定位置插入阶段"""
        self.stages.insert(index, stage)
        return self

    def remove(self, name: StageKind | str) -> "Pipeline":
        """移除所有指定名称的阶段"""
        target = name.value if isinstance(name, StageKind) else name
        self.stages = [s for s in self.stages if s.name != target]
        return self

    def clear(self) -> "Pipeline":
        """清空所有阶段"""
        self.stages = []
        return self

    def clone(self) -> "Pipeline":
        """复制流水线，阶段列表独立，执行器共享"""
        return Pipeline(self.options, self.sequencer, self.stages)

    def get_info(self) -> dict[str, Any]:
        """流水线信息"""
        return {
            "stage_count": len(self.stages),
            "stages": [stage.describe() for stage in self.stages],
        }

    @property
    def state(self) -> PipelineState:
        return self.sequencer.state

    def execute(self, image: ImageBuffer) -> ImageBuffer:
        """执行流水线"""
        return self.sequencer.execute(image, self.stages)
