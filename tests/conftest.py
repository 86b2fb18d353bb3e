"""测试配置文件。

提供测试所需的fixtures和配置，测试图片全部在临时目录中生成。
"""

import logging
import tempfile
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw

from image_zen.config import reset_config
from image_zen.utils.logging_helpers import PACKAGE_LOGGER


def _draw_photo_like(size: tuple[int, int]) -> Image.Image:
    """生成颜色丰富的图片"""
    width, height = size
    img = Image.new("RGB", size, color="white")
    draw = ImageDraw.Draw(img)
    for i in range(60):
        x, y = (i * 37) % width, (i * 23) % height
        color = (i * 41 % 256, i * 67 % 256, i * 97 % 256)
        draw.rectangle([x, y, x + width // 5, y + height // 6], fill=color)
    return img


@pytest.fixture(autouse=True)
def _fresh_config():
    """每个测试使用新的全局配置"""
    reset_config()
    yield
    reset_config()


@pytest.fixture(autouse=True)
def _clean_package_logger():
    """恢复包级日志记录器，避免处理器指向已关闭的流"""
    root = logging.getLogger(PACKAGE_LOGGER)
    level, handlers = root.level, list(root.handlers)
    root.handlers = []
    yield
    root.setLevel(level)
    root.handlers = handlers


@pytest.fixture
def temp_dir():
    """临时目录fixture"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_images(temp_dir: Path) -> dict[str, Path]:
    """生成不同类型的测试图片"""
    images: dict[str, Path] = {}

    photo_path = temp_dir / "photo.jpg"
    _draw_photo_like((320, 240)).save(photo_path, "JPEG", quality=95)
    images["photo"] = photo_path

    square_path = temp_dir / "square.png"
    Image.new("RGB", (100, 100), color=(30, 120, 200)).save(square_path, "PNG")
    images["square"] = square_path

    transparent_path = temp_dir / "transparent.png"
    transparent_img = Image.new("RGBA", (64, 48), color=(0, 0, 0, 0))
    draw = ImageDraw.Draw(transparent_img)
    draw.ellipse([8, 8, 56, 40], fill=(255, 80, 20, 200))
    transparent_img.save(transparent_path, "PNG")
    images["transparent"] = transparent_path

    tiny_path = temp_dir / "tiny.png"
    Image.new("RGB", (10, 10), color="red").save(tiny_path, "PNG")
    images["tiny"] = tiny_path

    return images


@pytest.fixture
def png_bytes():
    """返回生成指定尺寸 PNG 字节的函数"""

    def make(size: tuple[int, int] = (10, 10), mode: str = "RGB", color=(200, 10, 10)) -> bytes:
        buffer = BytesIO()
        Image.new(mode, size, color=color).save(buffer, "PNG")
        return buffer.getvalue()

    return make


@pytest.fixture
def image_dir(temp_dir: Path) -> Path:
    """包含多张图片和一个非图片文件的目录"""
    directory = temp_dir / "batch"
    directory.mkdir()
    for i, name in enumerate(["a.jpg", "b.png", "c.webp"]):
        img = Image.new("RGB", (40 + i * 10, 30), color=(i * 60, 100, 150))
        img.save(directory / name)
    (directory / "notes.txt").write_text("not an image")
    return directory


def open_bytes(data: bytes) -> Image.Image:
    """打开字节数据为图片"""
    img = Image.open(BytesIO(data))
    img.load()
    return img


@pytest.fixture
def decode():
    """解码图像字节"""
    return open_bytes
