"""背景移除处理器。

通过分割策略生成透明度蒙版，再以 destination-in 方式合成，输出 PNG。
"""

from ..config import ZenOptions
from ..exceptions import handle_image_errors
from ..models.image_buffer import ImageBuffer
from ..models.options import RemoveBackgroundOptions
from ..utils.logging_helpers import get_logger
from .codec import ImageSource, open_image, to_png_buffer
from .compositor import apply_mask
from .masks import MaskSynthesizer
from .segmentation import SegmentationStrategy, get_strategy


logger = get_logger()


class BackgroundRemover:
    """背景移除器

    Args:
        options: 运行选项
        strategy: 固定使用的分割策略；为 None 时按每次调用的选项选择
    """

    def __init__(
        self,
        options: ZenOptions | None = None,
        strategy: SegmentationStrategy | None = None,
    ):
        self.options = options or ZenOptions()
        self.strategy = strategy
        self.synthesizer = MaskSynthesizer()

    def _strategy_for(self, options: RemoveBackgroundOptions) -> SegmentationStrategy:
        if self.strategy is not None:
            return self.strategy
        return get_strategy(options.strategy, self.synthesizer)

    @handle_image_errors("Background removal")
    def apply(
        self, source: ImageSource, options: RemoveBackgroundOptions | None = None
    ) -> ImageBuffer:
        """移除背景并返回 PNG 缓冲区"""
        options = options or RemoveBackgroundOptions()
        strategy = self._strategy_for(options)

        with open_image(source) as img:
            if self.options.verbose:
                logger.info(f"使用 {strategy.name} 策略移除背景: {img.width}x{img.height}")

            mask = strategy.mask_for(img)
            return to_png_buffer(apply_mask(img, mask))

    def process(
        self, source: ImageSource, options: RemoveBackgroundOptions | None = None
    ) -> bytes:
        """移除背景并返回 PNG 字节"""
        return self.apply(source, options).data
