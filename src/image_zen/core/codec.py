"""编解码模块。

封装 Pillow 的图片打开、格式准备与编码，所有处理器通过这里访问编解码器。
"""

from collections.abc import Iterator
from contextlib import contextmanager
from io import BytesIO
from pathlib import Path
from typing import Any

from PIL import Image, ImageOps

from ..exceptions import ProcessingError, handle_image_errors
from ..models.constants import get_pillow_format, is_encoder_available
from ..models.image_buffer import ImageBuffer
from ..models.options import CompressOptions
from ..utils.logging_helpers import get_logger


logger = get_logger()

ImageSource = str | Path | bytes | bytearray | ImageBuffer


def read_source(source: ImageSource) -> bytes:
    """读取输入源的原始字节"""
    match source:
        case ImageBuffer():
            return source.data
        case bytes() | bytearray():
            return bytes(source)
        case str() | Path():
            return Path(source).read_bytes()
        case _:
            raise TypeError(f"unsupported image source: {type(source).__name__}")


def source_size(source: ImageSource) -> int:
    """输入源的字节数，用于质量估算"""
    match source:
        case ImageBuffer():
            return len(source.data)
        case bytes() | bytearray():
            return len(source)
        case _:
            return Path(source).stat().st_size


@handle_image_errors("Load image")
def load_buffer(source: ImageSource) -> ImageBuffer:
    """读取输入源并探测图像头信息"""
    if isinstance(source, ImageBuffer):
        return source
    return ImageBuffer.from_bytes(read_source(source))


@contextmanager
def open_image(source: ImageSource, exif_transpose: bool = True) -> Iterator[Image.Image]:
    """打开图片，作用域结束时释放编解码器句柄

    Args:
        source: 文件路径、字节或 ImageBuffer
        exif_transpose: 是否按 EXIF 方向信息旋转
    """
    match source:
        case str() | Path():
            fp: Any = Path(source)
        case _:
            fp = BytesIO(read_source(source))

    with Image.open(fp) as img:
        img.load()
        if exif_transpose:
            transposed = ImageOps.exif_transpose(img)
            try:
                yield transposed
            finally:
                if transposed is not img:
                    transposed.close()
        else:
            yield img


def ensure_alpha(img: Image.Image) -> Image.Image:
    """确保图片带有透明通道（RGBA）"""
    if img.mode == "RGBA":
        return img
    return img.convert("RGBA")


def encode(img: Image.Image, format_name: str, **params: Any) -> bytes:
    """把图片编码为指定格式的字节

    Raises:
        ProcessingError: 当前 Pillow 构建不支持该格式编码时
    """
    pillow_format = get_pillow_format(format_name)
    if not is_encoder_available(pillow_format):
        raise ProcessingError(
            f"Encoder for {format_name} is not available in this Pillow build"
        )

    buffer = BytesIO()
    img.save(buffer, format=pillow_format, **params)
    return buffer.getvalue()


def to_png_buffer(img: Image.Image) -> ImageBuffer:
    """编码为 PNG 并包装成 ImageBuffer"""
    data = encode(img, "png", optimize=False, compress_level=6)
    return ImageBuffer(
        data=data,
        width=img.width,
        height=img.height,
        channels=len(img.getbands()),
        has_alpha="A" in img.getbands(),
        format="PNG",
    )


class FormatProcessor:
    """格式处理器，为目标格式准备图片的色彩模式"""

    def prepare_for_format(self, img: Image.Image, target_format: str) -> Image.Image:
        """为目标格式准备图片

        Args:
            img: PIL图片对象
            target_format: 目标格式

        Returns:
            Image.Image: 处理后的图片对象
        """
        match get_pillow_format(target_format):
            case "JPEG":
                return self._prepare_for_jpeg(img)
            case "PNG":
                return self._prepare_for_png(img)
            case "WEBP" | "AVIF":
                return self._prepare_for_modern(img)
            case _:
                return img

    def _prepare_for_jpeg(self, img: Image.Image) -> Image.Image:
        """JPEG不支持透明度，按边缘像素平均色合成背景"""
        if img.mode == "P":
            if "transparency" not in img.info:
                return img.convert("RGB")
            img = img.convert("RGBA")

        if img.mode == "LA":
            img = img.convert("RGBA")

        if img.mode == "RGBA":
            background_color = self._get_optimal_background_color(img)
            rgb_img = Image.new("RGB", img.size, background_color)
            rgb_img.paste(img, mask=img.split()[-1])
            return rgb_img

        if img.mode != "RGB":
            # CMYK、灰度、二值等模式统一转换为RGB
            return img.convert("RGB")

        return img

    def _get_optimal_background_color(self, img: Image.Image) -> tuple[int, int, int]:
        """基于不透明的边缘像素选择背景色，默认白色"""
        edge_pixels = self._sample_edge_pixels(img)
        if len(edge_pixels) >= 3:
            return self._calculate_average_color(edge_pixels)
        return (255, 255, 255)

    def _sample_edge_pixels(self, img: Image.Image) -> list[tuple[int, int, int]]:
        """采样图像边缘的不透明像素"""
        width, height = img.size
        edge_pixels: list[tuple[int, int, int]] = []
        sample_step = max(1, min(width, height) // 10)

        points = [(x, y) for x in range(0, width, sample_step) for y in (0, height - 1)]
        points += [(x, y) for y in range(0, height, sample_step) for x in (0, width - 1)]

        for point in points:
            pixel = img.getpixel(point)
            if isinstance(pixel, tuple) and len(pixel) >= 4 and pixel[3] > 128:
                edge_pixels.append((int(pixel[0]), int(pixel[1]), int(pixel[2])))

        return edge_pixels

    def _calculate_average_color(
        self, edge_pixels: list[tuple[int, int, int]]
    ) -> tuple[int, int, int]:
        """计算边缘像素的平均颜色"""
        count = len(edge_pixels)
        return (
            sum(p[0] for p in edge_pixels) // count,
            sum(p[1] for p in edge_pixels) // count,
            sum(p[2] for p in edge_pixels) // count,
        )

    def _prepare_for_png(self, img: Image.Image) -> Image.Image:
        """PNG支持多种色彩模式，只处理调色板和CMYK"""
        if img.mode == "P":
            if "transparency" in img.info:
                return img.convert("RGBA")
            return img.convert("RGB")

        if img.mode == "CMYK":
            return img.convert("RGB")

        return img

    def _prepare_for_modern(self, img: Image.Image) -> Image.Image:
        """WebP/AVIF 只接受 RGB 与 RGBA"""
        if img.mode == "P":
            if "transparency" in img.info:
                return img.convert("RGBA")
            return img.convert("RGB")
        if img.mode == "LA":
            return img.convert("RGBA")
        if img.mode not in ("RGB", "RGBA"):
            return img.convert("RGB")

        return img


def get_save_parameters(format_name: str, options: CompressOptions) -> dict[str, Any]:
    """获取保存参数

    Returns:
        dict: 传给 Image.save 的参数（不含 format）
    """
    match get_pillow_format(format_name):
        case "WEBP":
            return get_webp_params(options)
        case "AVIF":
            return get_avif_params(options)
        case "JPEG":
            return get_jpeg_params(options)
        case "PNG":
            return get_png_params(options)
        case _:
            raise ProcessingError(f"Unsupported compression format: {format_name}")


def get_webp_params(options: CompressOptions) -> dict[str, Any]:
    """获取WebP压缩参数

    质量 ≥ 95 时使用无损模式；method 0=快速，6=最慢但最佳压缩。
    """
    quality = options.quality or 80
    params: dict[str, Any] = {
        "quality": quality,
        "method": 6 if options.optimize_for_size else min(options.effort, 6),
    }

    if quality >= 95:
        params["lossless"] = True
        params["exact"] = True
    elif quality >= 85:
        params["alpha_quality"] = 100  # 透明通道无损
    else:
        params["alpha_quality"] = min(100, quality + 10)

    return params


def get_avif_params(options: CompressOptions) -> dict[str, Any]:
    """获取AVIF压缩参数

    speed 与 effort 方向相反：0=最慢最佳，10=最快。
    """
    quality = options.quality or 80
    effort = 9 if options.optimize_for_size else min(options.effort * 2, 9)
    return {
        "quality": quality,
        "speed": 9 - effort,
        "subsampling": "4:2:0" if quality < 90 else "4:4:4",
    }


def get_jpeg_params(options: CompressOptions) -> dict[str, Any]:
    """获取JPEG压缩参数"""
    quality = options.quality or 80
    params: dict[str, Any] = {
        "quality": quality,
        "optimize": options.optimize_for_size,
        "progressive": options.progressive,
    }

    # 色度子采样：高质量时保留更多色彩信息
    params["subsampling"] = 0 if quality >= 90 else 2
    return params


def get_png_params(options: CompressOptions) -> dict[str, Any]:
    """获取PNG压缩参数

    PNG 为无损格式，质量参数不参与编码；optimize=True 时 Pillow 使用最佳压缩级别。
    """
    return {
        "optimize": options.optimize_for_size,
        "compress_level": 9 if options.optimize_for_size else min(options.effort + 2, 9),
    }
