"""图像压缩处理器。

按目标格式准备色彩模式、可选缩小尺寸，然后用格式相关参数重新编码。
"""

from typing import Any

from PIL import Image

from ..config import ZenOptions
from ..exceptions import handle_image_errors
from ..models.constants import get_pillow_format
from ..models.image_buffer import ImageBuffer
from ..models.options import CompressOptions
from ..utils.logging_helpers import get_logger
from .codec import (
    FormatProcessor,
    ImageSource,
    encode,
    get_save_parameters,
    open_image,
)
from .quality import QualityEstimator


logger = get_logger()


class ImageCompressor:
    """图像压缩器"""

    def __init__(
        self,
        options: ZenOptions | None = None,
        estimator: QualityEstimator | None = None,
    ):
        self.options = options or ZenOptions()
        self.estimator = estimator or QualityEstimator(self.options)
        self.format_processor = FormatProcessor()

    def optimal_quality(self, source: ImageSource, target_format: str = "webp") -> int:
        """估算最佳压缩质量，失败时返回回退质量"""
        return self.estimator.optimal_quality(source, target_format)

    def resolve_options(
        self, source: ImageSource, options: CompressOptions | None = None
    ) -> CompressOptions:
        """补全压缩选项：未指定质量时按图片内容估算"""
        options = options or CompressOptions(
            quality=self.options.default_quality, format=self.options.default_format
        )
        if options.quality is None:
            quality = self.optimal_quality(source, options.format)
            options = options.model_copy(update={"quality": quality})
        return options

    @handle_image_errors("Compression")
    def apply(
        self, source: ImageSource, options: CompressOptions | None = None
    ) -> ImageBuffer:
        """压缩图片并返回缓冲区"""
        options = self.resolve_options(source, options)

        with open_image(source) as img:
            original_size = img.size
            processed = self._resize(img, options)
            processed = self.format_processor.prepare_for_format(processed, options.format)

            save_params = get_save_parameters(options.format, options)
            save_params.update(self._metadata_params(img, options))

            data = encode(processed, options.format, **save_params)

            if self.options.verbose:
                logger.info(
                    f"压缩完成: {original_size[0]}x{original_size[1]} → "
                    f"{processed.width}x{processed.height}, "
                    f"{options.format} q={options.quality}, {len(data)} bytes"
                )

            return ImageBuffer.from_image(processed, data).model_copy(
                update={"format": get_pillow_format(options.format)}
            )

    def process(
        self, source: ImageSource, options: CompressOptions | None = None
    ) -> bytes:
        """压缩图片并返回编码后的字节"""
        return self.apply(source, options).data

    def _resize(self, img: Image.Image, options: CompressOptions) -> Image.Image:
        """按最大宽高等比缩小，不放大"""
        if not options.should_resize:
            return img

        current_width, current_height = img.size
        max_width = options.max_width or current_width
        max_height = options.max_height or current_height

        if current_width <= max_width and current_height <= max_height:
            return img

        ratio = min(max_width / current_width, max_height / current_height)
        new_size = (max(1, int(current_width * ratio)), max(1, int(current_height * ratio)))
        logger.debug(f"调整尺寸: {img.size} → {new_size}")
        return img.resize(new_size, Image.Resampling.LANCZOS)

    def _metadata_params(
        self, img: Image.Image, options: CompressOptions
    ) -> dict[str, Any]:
        """保留元数据时传递 EXIF 与 ICC 配置文件，否则全部丢弃"""
        if not options.preserve_metadata:
            return {}

        params: dict[str, Any] = {}
        if exif := img.info.get("exif"):
            params["exif"] = exif
        if icc_profile := img.info.get("icc_profile"):
            params["icc_profile"] = icc_profile
        return params
