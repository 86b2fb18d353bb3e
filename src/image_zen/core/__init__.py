"""核心模块包。

编解码、质量估算、蒙版合成以及三种图像处理器。
"""

from .background import BackgroundRemover
from .codec import FormatProcessor, ensure_alpha, open_image
from .compositor import apply_mask, compose
from .compressor import ImageCompressor
from .masks import MaskStyle, MaskSynthesizer, radial_alpha
from .quality import QualityEstimator, compute_channel_stats
from .segmentation import (
    BlendedHeuristic,
    RadialFallback,
    SegmentationStrategy,
    get_strategy,
)
from .upscaler import ImageUpscaler


__all__ = [
    "BackgroundRemover",
    "BlendedHeuristic",
    "FormatProcessor",
    "ImageCompressor",
    "ImageUpscaler",
    "MaskStyle",
    "MaskSynthesizer",
    "QualityEstimator",
    "RadialFallback",
    "SegmentationStrategy",
    "apply_mask",
    "compose",
    "compute_channel_stats",
    "ensure_alpha",
    "get_strategy",
    "open_image",
    "radial_alpha",
]
