"""图像处理相关常量定义。

输入扩展名、输出格式与编码器别名的集中管理。
"""

from typing import Final

from PIL import Image


class SupportedFormats:
    """支持的输入输出格式"""

    # 输入扩展名（不含点）
    INPUT: Final[tuple[str, ...]] = ("jpg", "jpeg", "png", "webp", "tiff", "bmp")

    # 输出格式
    OUTPUT: Final[tuple[str, ...]] = ("jpg", "jpeg", "png", "webp", "avif")

    # 编码器别名，映射到标准输出格式
    ALIASES: Final[dict[str, str]] = {
        "mozjpeg": "jpeg",
        "oxipng": "png",
    }

    # 输出格式到 Pillow 格式名的映射
    PILLOW_NAMES: Final[dict[str, str]] = {
        "jpg": "JPEG",
        "jpeg": "JPEG",
        "png": "PNG",
        "webp": "WEBP",
        "avif": "AVIF",
    }

    # 目录输入时扫描的扩展名
    DIRECTORY_SCAN: Final[tuple[str, ...]] = ("jpg", "jpeg", "png", "webp")

    @classmethod
    def as_dict(cls) -> dict[str, list[str]]:
        """以字典形式返回支持的格式"""
        return {"input": list(cls.INPUT), "output": list(cls.OUTPUT)}


FEATURES: Final[tuple[str, ...]] = (
    "Background Removal",
    "AI Super-resolution",
    "Smart Compression",
    "Pipeline Processing",
    "CLI Support",
)


def normalize_format(format_str: str) -> str:
    """获取格式的标准名称（小写，别名已解析）"""
    lowered = format_str.strip().lower()
    return SupportedFormats.ALIASES.get(lowered, lowered)


def get_pillow_format(format_str: str) -> str:
    """获取 Pillow 保存时使用的格式名"""
    standard = normalize_format(format_str)
    return SupportedFormats.PILLOW_NAMES.get(standard, standard.upper())


def is_encoder_available(format_str: str) -> bool:
    """检查当前 Pillow 构建是否能编码该格式"""
    # 插件是惰性加载的
    Image.init()
    return get_pillow_format(format_str) in Image.SAVE
