"""数据模型包。

定义图片处理相关的数据结构和模型。
"""

from .constants import (
    FEATURES,
    SupportedFormats,
    get_pillow_format,
    is_encoder_available,
    normalize_format,
)
from .image_buffer import ChannelStats, ImageBuffer, Mask, QualityReport
from .options import (
    CompressOptions,
    EnhanceConfig,
    ImageValidators,
    RemoveBackgroundOptions,
    SegmentationMode,
    UpscaleAlgorithm,
    UpscaleOptions,
)
from .results import (
    BatchItemResult,
    BatchResult,
    PipelineState,
    PipelineStatus,
)
from .stages import (
    Compress,
    PipelineStage,
    RemoveBackground,
    StageKind,
    UnknownStage,
    Upscale,
    parse_task,
    parse_tasks,
)


__all__ = [
    "FEATURES",
    "BatchItemResult",
    "BatchResult",
    "ChannelStats",
    "Compress",
    "CompressOptions",
    "EnhanceConfig",
    "ImageBuffer",
    "ImageValidators",
    "Mask",
    "PipelineStage",
    "PipelineState",
    "PipelineStatus",
    "QualityReport",
    "RemoveBackground",
    "RemoveBackgroundOptions",
    "SegmentationMode",
    "StageKind",
    "SupportedFormats",
    "UnknownStage",
    "Upscale",
    "UpscaleAlgorithm",
    "UpscaleOptions",
    "get_pillow_format",
    "is_encoder_available",
    "normalize_format",
    "parse_task",
    "parse_tasks",
]
