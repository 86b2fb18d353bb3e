"""前景分割策略模块。

SegmentationStrategy 是蒙版来源的抽象接口。当前没有模型推理实现，
默认使用 RadialFallback；接入模型时新增一个实现即可，处理器无需改动。
"""

from abc import ABC, abstractmethod

from PIL import Image

from ..models.image_buffer import Mask
from ..models.options import SegmentationMode
from .masks import MaskStyle, MaskSynthesizer


class SegmentationStrategy(ABC):
    """分割策略接口"""

    name: str = "base"

    def __init__(self, synthesizer: MaskSynthesizer | None = None):
        self.synthesizer = synthesizer or MaskSynthesizer()

    @abstractmethod
    def mask_for(self, img: Image.Image) -> Mask:
        """为图片生成同尺寸的透明度蒙版"""


class RadialFallback(SegmentationStrategy):
    """径向渐变蒙版，只依赖图片尺寸"""

    name = "radial"

    def mask_for(self, img: Image.Image) -> Mask:
        return self.synthesizer.synthesize(img.width, img.height, MaskStyle.RADIAL_ALPHA)


class BlendedHeuristic(SegmentationStrategy):
    """边缘响应、椭圆中心与边缘距离三种蒙版的加权混合"""

    name = "blended"

    def mask_for(self, img: Image.Image) -> Mask:
        width, height = img.size
        edge = self.synthesizer.edge_response(img)
        center = self.synthesizer.synthesize(width, height, MaskStyle.ELLIPTICAL_SOFT)
        color = self.synthesizer.synthesize(width, height, MaskStyle.COLOR_VARIANCE_EDGE)
        return self.synthesizer.blend(edge, center, color)


def get_strategy(
    mode: SegmentationMode, synthesizer: MaskSynthesizer | None = None
) -> SegmentationStrategy:
    """根据分割模式获取策略实例"""
    match mode:
        case SegmentationMode.RADIAL:
            return RadialFallback(synthesizer)
        case SegmentationMode.BLENDED:
            return BlendedHeuristic(synthesizer)
        case _:
            raise ValueError(f"Unknown segmentation strategy: {mode}")
