"""图像放大处理器。

插值放大后按选项进行锐化、色调增强和降噪，输出总是 PNG。
"""

from PIL import Image, ImageEnhance, ImageFilter

from ..config import ZenOptions
from ..exceptions import ProcessingError, handle_image_errors
from ..models.image_buffer import ImageBuffer
from ..models.options import UpscaleAlgorithm, UpscaleOptions
from ..utils.logging_helpers import get_logger
from .codec import ImageSource, open_image, to_png_buffer


logger = get_logger()

ALLOWED_SCALES = (2, 4)

RESAMPLING: dict[UpscaleAlgorithm, Image.Resampling] = {
    UpscaleAlgorithm.LANCZOS3: Image.Resampling.LANCZOS,
    UpscaleAlgorithm.CUBIC: Image.Resampling.BICUBIC,
    UpscaleAlgorithm.LINEAR: Image.Resampling.BILINEAR,
}

# 细节增强参数
DETAIL_SHARPEN = {2: 2.2, 4: 3.0}
PLAIN_SHARPEN = {2: 1.8, 4: 2.5}
FINISH_SHARPEN = 1.5
BRIGHTNESS = 1.02
SATURATION = 1.05
LINEAR_MULTIPLIER = 1.08
LINEAR_OFFSET = -3


def _sharpen(img: Image.Image, sigma: float, threshold: int = 2) -> Image.Image:
    return img.filter(ImageFilter.UnsharpMask(radius=sigma, percent=100, threshold=threshold))


def _linear(img: Image.Image, multiplier: float, offset: float) -> Image.Image:
    """逐通道线性色调调整 v' = v * a + b，结果截断到 [0, 255]"""
    table = [min(255, max(0, round(v * multiplier + offset))) for v in range(256)]
    return img.point(table * len(img.getbands()))


class ImageUpscaler:
    """图像放大器"""

    def __init__(self, options: ZenOptions | None = None):
        self.options = options or ZenOptions()

    @handle_image_errors("Upscaling")
    def apply(
        self, source: ImageSource, scale: int = 2, options: UpscaleOptions | None = None
    ) -> ImageBuffer:
        """放大图片并返回 PNG 缓冲区

        Raises:
            ProcessingError: scale 不是 2 或 4 时
        """
        if scale not in ALLOWED_SCALES:
            raise ProcessingError("Upscaling scale must be 2 or 4")

        options = options or UpscaleOptions()

        with open_image(source) as img:
            new_size = (round(img.width * scale), round(img.height * scale))

            if self.options.verbose:
                logger.info(f"使用 {options.algorithm.value} 插值放大 {scale}x: {img.size} → {new_size}")

            has_alpha = "A" in img.getbands() or "transparency" in img.info
            rgb = img.convert("RGBA" if has_alpha else "RGB")

            alpha = None
            if has_alpha:
                alpha = rgb.getchannel("A")
                rgb = rgb.convert("RGB")

            resampling = RESAMPLING[options.algorithm]
            result = rgb.resize(new_size, resampling)
            result = self._enhance(result, scale, options)

            if alpha is not None:
                result.putalpha(alpha.resize(new_size, resampling))

            return to_png_buffer(result)

    def process(
        self, source: ImageSource, scale: int = 2, options: UpscaleOptions | None = None
    ) -> bytes:
        """放大图片并返回 PNG 字节"""
        return self.apply(source, scale, options).data

    def _enhance(self, img: Image.Image, scale: int, options: UpscaleOptions) -> Image.Image:
        """锐化、色调与降噪"""
        if options.enhance_details:
            img = _sharpen(img, DETAIL_SHARPEN[scale], threshold=0)
            img = ImageEnhance.Brightness(img).enhance(BRIGHTNESS)
            img = ImageEnhance.Color(img).enhance(SATURATION)
            img = _linear(img, LINEAR_MULTIPLIER, LINEAR_OFFSET)
            img = _sharpen(img, FINISH_SHARPEN)
        elif options.sharpen:
            img = _sharpen(img, PLAIN_SHARPEN[scale])

        if scale >= 4:
            # 中值滤波窗口必须为奇数
            img = img.filter(ImageFilter.MedianFilter(3))

        return img
