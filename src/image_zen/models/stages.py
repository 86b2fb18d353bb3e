"""流水线阶段模型。

阶段是一个封闭的标签变体：RemoveBackground | Upscale | Compress。
UnknownStage 只由文本解析边界产生，用于保留未识别的任务名。
"""

from enum import Enum
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .options import (
    CompressOptions,
    RemoveBackgroundOptions,
    UpscaleOptions,
)


class StageKind(str, Enum):
    """阶段类型"""

    REMOVE_BACKGROUND = "removeBackground"
    UPSCALE = "upscale"
    COMPRESS = "compress"
    UNKNOWN = "unknown"


class _Stage(BaseModel):
    model_config = ConfigDict(frozen=True)

    @property
    def name(self) -> str:
        return self.kind.value  # type: ignore[attr-defined]

    def describe(self) -> dict[str, Any]:
        """阶段信息，用于 Pipeline.get_info"""
        return {"name": self.name, "args": self.model_dump(exclude={"kind"})}


class RemoveBackground(_Stage):
    """背景移除阶段"""

    kind: Literal[StageKind.REMOVE_BACKGROUND] = StageKind.REMOVE_BACKGROUND
    options: RemoveBackgroundOptions = Field(default_factory=RemoveBackgroundOptions)


class Upscale(_Stage):
    """放大阶段"""

    kind: Literal[StageKind.UPSCALE] = StageKind.UPSCALE
    scale: int = 2
    options: UpscaleOptions = Field(default_factory=UpscaleOptions)

    @field_validator("scale")
    @classmethod
    def validate_scale(cls, v: int) -> int:
        if v not in (2, 4):
            raise ValueError(f"Scale must be 2 or 4, got: {v}")
        return v


class Compress(_Stage):
    """压缩阶段"""

    kind: Literal[StageKind.COMPRESS] = StageKind.COMPRESS
    options: CompressOptions = Field(default_factory=CompressOptions)

    @property
    def format(self) -> str:
        return self.options.format

    @property
    def quality(self) -> int | None:
        return self.options.quality


class UnknownStage(_Stage):
    """未识别的任务名，仅由 parse_task 产生"""

    kind: Literal[StageKind.UNKNOWN] = StageKind.UNKNOWN
    tag: str

    @property
    def name(self) -> str:
        return self.tag


PipelineStage = Annotated[
    RemoveBackground | Upscale | Compress | UnknownStage,
    Field(discriminator="kind"),
]

# 文本任务名到阶段类型的映射
TASK_NAMES: dict[str, StageKind] = {
    "remove-bg": StageKind.REMOVE_BACKGROUND,
    "upscale": StageKind.UPSCALE,
    "compress": StageKind.COMPRESS,
}


def parse_task(
    task: str,
    scale: int = 2,
    compression: CompressOptions | None = None,
    background: RemoveBackgroundOptions | None = None,
    upscaling: UpscaleOptions | None = None,
) -> RemoveBackground | Upscale | Compress | UnknownStage:
    """将文本任务名解析为阶段

    未识别的任务名不会在此处报错，而是产生 UnknownStage，
    由流水线在分派到该阶段时报告。
    """
    match TASK_NAMES.get(task.strip()):
        case StageKind.REMOVE_BACKGROUND:
            return RemoveBackground(options=background or RemoveBackgroundOptions())
        case StageKind.UPSCALE:
            return Upscale(scale=scale, options=upscaling or UpscaleOptions())
        case StageKind.COMPRESS:
            return Compress(options=compression or CompressOptions())
        case _:
            return UnknownStage(tag=task)


def parse_tasks(tasks: str | list[str], **kwargs: Any) -> list[Any]:
    """解析逗号分隔字符串或任务名列表"""
    if isinstance(tasks, str):
        tasks = [t for t in tasks.split(",") if t.strip()]
    return [parse_task(t.strip(), **kwargs) for t in tasks]
