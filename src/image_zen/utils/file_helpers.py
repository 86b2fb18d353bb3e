"""工具函数模块。

提供输入文件展开等文件系统相关的实用工具函数。
"""

import glob
from pathlib import Path

from ..models.constants import SupportedFormats
from .logging_helpers import get_logger
from .message_formatter import MessageFormatter


logger = get_logger()

GLOB_CHARS = ("*", "?", "[")


def is_glob_pattern(value: str) -> bool:
    """判断输入是否为通配符模式"""
    return any(ch in value for ch in GLOB_CHARS)


def find_image_files(directory: str | Path) -> list[Path]:
    """查找目录顶层的图像文件，不递归。

    Args:
        directory: 搜索目录

    Returns:
        list[Path]: 按文件名排序的图像文件路径
    """
    directory = Path(directory)

    if not directory.is_dir():
        logger.warning(MessageFormatter.path_not_directory(directory))
        return []

    extensions = {f".{ext}" for ext in SupportedFormats.DIRECTORY_SCAN}
    return sorted(
        p for p in directory.iterdir() if p.is_file() and p.suffix.lower() in extensions
    )


def expand_input(input_value: str | Path) -> list[Path]:
    """把命令行输入展开为文件列表

    - 通配符模式：返回所有匹配项
    - 目录：返回顶层的 jpg/jpeg/png/webp 文件
    - 其他：原样作为单个文件返回，由后续验证检查是否存在
    """
    text = str(input_value)

    if is_glob_pattern(text):
        matches = sorted(Path(p) for p in glob.glob(text))
        if not matches:
            logger.warning(f"通配符没有匹配到文件: {text}")
        return matches

    path = Path(text)
    if path.is_dir():
        return find_image_files(path)

    return [path]
