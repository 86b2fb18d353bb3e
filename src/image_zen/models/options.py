"""处理选项模型。

定义压缩、放大、背景移除与组合增强的配置参数，以及集中的参数验证逻辑。
"""

import os
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from .constants import SupportedFormats, normalize_format


class UpscaleAlgorithm(str, Enum):
    """放大插值算法"""

    LANCZOS3 = "lanczos3"
    CUBIC = "cubic"
    LINEAR = "linear"


class SegmentationMode(str, Enum):
    """背景分割策略"""

    RADIAL = "radial"  # 径向渐变蒙版（默认）
    BLENDED = "blended"  # 边缘/中心/位置三种蒙版加权


class CompressOptions(BaseModel):
    """压缩选项"""

    quality: int | None = Field(80, ge=1, le=100, description="压缩质量，None为智能估算")
    format: str = Field("webp", description="输出格式")
    progressive: bool = Field(True, description="渐进式编码")
    optimize_for_size: bool = Field(True, description="优先压缩体积")
    preserve_metadata: bool = Field(False, description="保留元数据")
    max_width: int | None = Field(None, gt=0, description="最大宽度")
    max_height: int | None = Field(None, gt=0, description="最大高度")
    effort: int = Field(4, ge=0, le=9, description="编码努力程度")

    @field_validator("format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        normalized = normalize_format(v)
        if normalized not in SupportedFormats.OUTPUT:
            raise ValueError(
                f"Unsupported compression format: {v}. "
                f"Supported formats: {', '.join(SupportedFormats.OUTPUT)}"
            )
        return normalized

    @property
    def should_resize(self) -> bool:
        """是否需要调整尺寸"""
        return self.max_width is not None or self.max_height is not None


class UpscaleOptions(BaseModel):
    """放大选项"""

    algorithm: UpscaleAlgorithm = Field(UpscaleAlgorithm.LANCZOS3, description="插值算法")
    sharpen: bool = Field(True, description="锐化")
    enhance_details: bool = Field(True, description="细节增强")


class RemoveBackgroundOptions(BaseModel):
    """背景移除选项"""

    strategy: SegmentationMode = Field(SegmentationMode.RADIAL, description="分割策略")


class EnhanceConfig(BaseModel):
    """组合增强配置"""

    tasks: list[str] = Field(default_factory=list, description="任务名称列表")
    output: Path | None = Field(None, description="输出文件路径")
    scale: int = Field(2, description="放大倍数")
    compression: CompressOptions = Field(
        default_factory=CompressOptions, description="压缩选项"
    )
    background: RemoveBackgroundOptions = Field(
        default_factory=RemoveBackgroundOptions, description="背景移除选项"
    )
    upscaling: UpscaleOptions = Field(
        default_factory=UpscaleOptions, description="放大选项"
    )


# ============================================================================
# 验证器类 - 集中的参数验证逻辑
# ============================================================================


class ImageValidators:
    """输入与参数验证器集合

    所有检查都在处理开始前执行，失败时抛出 ValidationError。
    """

    @staticmethod
    def validate_input(input_data: Any) -> None:
        """验证输入图像（文件路径或字节缓冲区）

        Raises:
            ValidationError: 输入缺失、为空、不存在、扩展名不支持或不可读时
        """
        from ..exceptions import ValidationError

        if input_data is None or (isinstance(input_data, str) and not input_data):
            raise ValidationError("Input is required")

        if isinstance(input_data, bytes | bytearray):
            if len(input_data) == 0:
                raise ValidationError("Input buffer is empty")
            return

        if not isinstance(input_data, str | Path):
            raise ValidationError("Input must be a file path or a bytes buffer")

        path = Path(input_data)
        if not path.exists():
            raise ValidationError(f"Input file does not exist: {path}", path)

        if not path.is_file():
            raise ValidationError(f"Input path is not a file: {path}", path)

        ext = path.suffix.lower().lstrip(".")
        if ext not in SupportedFormats.INPUT:
            raise ValidationError(
                f"Unsupported input format: {ext}. "
                f"Supported formats: {', '.join(SupportedFormats.INPUT)}",
                path,
            )

        if not os.access(path, os.R_OK):
            raise ValidationError(f"Cannot read input file: {path}", path)

    @staticmethod
    def validate_output_format(format_str: str | None) -> str:
        """验证并标准化输出格式

        Returns:
            str: 标准化的格式名称（小写，别名已解析）
        """
        from ..exceptions import ValidationError

        if not format_str:
            raise ValidationError("Output format is required")

        normalized = normalize_format(format_str)
        if normalized not in SupportedFormats.OUTPUT:
            raise ValidationError(
                f"Unsupported output format: {format_str}. "
                f"Supported formats: {', '.join(SupportedFormats.OUTPUT)}"
            )
        return normalized

    @staticmethod
    def validate_quality(quality: Any) -> int:
        """验证质量参数"""
        from ..exceptions import ValidationError

        if isinstance(quality, bool) or not isinstance(quality, int | float):
            raise ValidationError("Quality must be a number")

        if not (1 <= quality <= 100):
            raise ValidationError(f"Quality must be between 1 and 100, got: {quality}")

        return int(quality)

    @staticmethod
    def validate_scale(scale: Any) -> int:
        """验证放大倍数"""
        from ..exceptions import ValidationError

        if isinstance(scale, bool) or not isinstance(scale, int | float):
            raise ValidationError("Scale must be a number")

        if scale not in (2, 4):
            raise ValidationError(f"Scale must be 2 or 4, got: {scale}")

        return int(scale)

    @staticmethod
    def validate_output_path(output_path: str | Path) -> Path:
        """验证输出路径，必要时创建目录

        Raises:
            ValidationError: 目录无法创建或不可写时
        """
        from ..exceptions import ValidationError

        if not output_path:
            raise ValidationError("Output path must be provided")

        path = Path(output_path)
        directory = path.parent

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValidationError(
                f"Cannot create output directory: {directory}", path
            ) from e

        if not os.access(directory, os.W_OK):
            raise ValidationError(f"Cannot write to output directory: {directory}", path)

        return path
