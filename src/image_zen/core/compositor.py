"""蒙版合成模块。

把透明度蒙版以 destination-in 方式作用到图片上：
输出透明度 = min(原透明度, 蒙版透明度)，RGB 不变，输出总是 PNG。
"""

from PIL import Image, ImageChops

from ..exceptions import ProcessingError, handle_image_errors
from ..models.image_buffer import ImageBuffer, Mask
from ..utils.logging_helpers import get_logger
from .codec import ensure_alpha, open_image, to_png_buffer


logger = get_logger()


def apply_mask(img: Image.Image, mask: Mask) -> Image.Image:
    """对已解码的图片应用蒙版

    Raises:
        ProcessingError: 蒙版尺寸与图片不一致时
    """
    if mask.dimensions != img.size:
        raise ProcessingError(
            f"Mask size {mask.width}x{mask.height} does not match "
            f"image size {img.width}x{img.height}"
        )

    rgba = ensure_alpha(img)
    red, green, blue, alpha = rgba.split()
    new_alpha = ImageChops.darker(alpha, mask.to_image())
    return Image.merge("RGBA", (red, green, blue, new_alpha))


@handle_image_errors("Composite")
def compose(image: ImageBuffer, mask: Mask) -> ImageBuffer:
    """把蒙版合成到图片缓冲区上，返回 PNG 缓冲区"""
    with open_image(image, exif_transpose=False) as img:
        result = apply_mask(img, mask)
        logger.debug(f"合成蒙版: {img.width}x{img.height}")
        return to_png_buffer(result)
