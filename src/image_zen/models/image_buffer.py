"""图像数据模型。

定义在处理流程中传递的图像缓冲区、蒙版与统计信息结构。
"""

from io import BytesIO

import numpy as np
from PIL import Image
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class ImageBuffer(BaseModel):
    """已编码的图像缓冲区，附带尺寸与通道信息"""

    model_config = ConfigDict(frozen=True)

    data: bytes = Field(description="编码后的图像字节")
    width: int = Field(gt=0, description="图片宽度")
    height: int = Field(gt=0, description="图片高度")
    channels: int = Field(ge=1, le=4, description="通道数")
    has_alpha: bool = Field(default=False, description="是否有透明通道")
    format: str | None = Field(default=None, description="Pillow 识别的格式")

    @classmethod
    def from_bytes(cls, data: bytes) -> "ImageBuffer":
        """探测字节流的头部信息并构建缓冲区

        只读取图像头，不解码像素。
        """
        with Image.open(BytesIO(data)) as img:
            return cls.from_image(img, data)

    @classmethod
    def from_image(cls, img: Image.Image, data: bytes) -> "ImageBuffer":
        """根据已打开的图片和其编码字节构建缓冲区"""
        bands = img.getbands()
        has_alpha = "A" in bands or "transparency" in img.info
        return cls(
            data=data,
            width=img.width,
            height=img.height,
            channels=len(bands),
            has_alpha=has_alpha,
            format=img.format,
        )

    @computed_field
    def size_bytes(self) -> int:
        """字节数"""
        return len(self.data)

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)


class Mask(BaseModel):
    """单通道透明度蒙版

    按行优先顺序存储 width × height 个 0-255 的值，构建后只读。
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    width: int = Field(gt=0)
    height: int = Field(gt=0)
    values: np.ndarray

    @model_validator(mode="after")
    def _check_shape(self) -> "Mask":
        if self.values.shape != (self.height, self.width):
            raise ValueError(
                f"mask values shape {self.values.shape} does not match "
                f"{self.height}x{self.width}"
            )
        if self.values.dtype != np.uint8:
            raise ValueError(f"mask values must be uint8, got {self.values.dtype}")
        self.values.setflags(write=False)
        return self

    @property
    def channels(self) -> int:
        return 1

    @property
    def dimensions(self) -> tuple[int, int]:
        return (self.width, self.height)

    def __len__(self) -> int:
        return self.width * self.height

    def at(self, x: int, y: int) -> int:
        """获取 (x, y) 处的透明度"""
        return int(self.values[y, x])

    def to_image(self) -> Image.Image:
        """转换为 L 模式的 Pillow 图片"""
        return Image.fromarray(self.values)

    def to_rgba(self) -> np.ndarray:
        """展开为 RGBA 数组，RGB 为白色，A 为蒙版值"""
        rgba = np.full((self.height, self.width, 4), 255, dtype=np.uint8)
        rgba[..., 3] = self.values
        return rgba


class ChannelStats(BaseModel):
    """通道统计信息"""

    model_config = ConfigDict(frozen=True)

    stdevs: list[float] = Field(min_length=1, description="各通道标准差")
    entropy: float = Field(ge=0, description="灰度直方图熵（比特）")

    @property
    def mean_stdev(self) -> float:
        """各通道标准差的平均值"""
        return sum(self.stdevs) / len(self.stdevs)


class QualityReport(BaseModel):
    """压缩质量估算报告"""

    model_config = ConfigDict(frozen=True)

    is_photographic: bool = Field(description="是否为照片类图片")
    complexity_score: float = Field(ge=0, le=1, description="复杂度评分")
    recommended_quality: int = Field(ge=50, le=100, description="推荐质量值")
