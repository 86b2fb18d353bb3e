"""本地优先的图像处理库。

基于 Pillow 的背景移除、放大、压缩与流水线组合处理。
"""

__version__ = "1.0.0"
__description__ = "本地优先的图像处理工具，基于 Pillow"

# 核心功能导出
from .api import (
    ImageZen,
    compress,
    enhance,
    get_info,
    remove_background,
    upscale,
)
from .config import ZenOptions
from .engine.pipeline import Pipeline, PipelineSequencer
from .exceptions import ImageZenError, ProcessingError, UnknownTaskError, ValidationError
from .models import (
    Compress,
    CompressOptions,
    EnhanceConfig,
    RemoveBackground,
    RemoveBackgroundOptions,
    Upscale,
    UpscaleOptions,
)


__all__ = [
    "Compress",
    "CompressOptions",
    "EnhanceConfig",
    "ImageZen",
    "ImageZenError",
    "Pipeline",
    "PipelineSequencer",
    "ProcessingError",
    "RemoveBackground",
    "RemoveBackgroundOptions",
    "UnknownTaskError",
    "Upscale",
    "UpscaleOptions",
    "ValidationError",
    "ZenOptions",
    "compress",
    "enhance",
    "get_info",
    "get_version",
    "remove_background",
    "upscale",
]


def get_version() -> str:
    """获取版本号。"""
    return __version__
