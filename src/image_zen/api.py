"""图像处理接口。

ImageZen 门面类组合三个处理器与流水线，模块级函数使用默认配置的实例。
所有参数在处理开始前验证，验证失败抛出 ValidationError。
"""

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from .config import ZenOptions
from .core.background import BackgroundRemover
from .core.codec import ImageSource, load_buffer
from .core.compressor import ImageCompressor
from .core.upscaler import ImageUpscaler
from .engine.batch import BatchProcessor
from .engine.pipeline import PipelineSequencer
from .exceptions import ValidationError
from .models.constants import FEATURES, SupportedFormats, is_encoder_available
from .models.options import (
    CompressOptions,
    EnhanceConfig,
    ImageValidators,
    RemoveBackgroundOptions,
    UpscaleOptions,
)
from .models.stages import parse_tasks
from .utils.logging_helpers import get_logger


logger = get_logger()

PACKAGE_NAME = "image-zen"


def _pydantic_message(error: PydanticValidationError) -> str:
    """取第一个错误的描述，去掉 pydantic 的 "Value error, " 前缀"""
    first = error.errors()[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = str(first.get("msg", error)).removeprefix("Value error, ")
    return f"{location}: {message}" if location else message


def _precheck_compression(values: dict[str, Any]) -> None:
    """在构建模型前检查质量与格式，使错误消息与单独调用时一致"""
    if values.get("quality") is not None:
        ImageValidators.validate_quality(values["quality"])
    if values.get("format") is not None:
        ImageValidators.validate_output_format(values["format"])


def build_compress_options(
    options: CompressOptions | dict[str, Any] | None = None,
    defaults: ZenOptions | None = None,
    **overrides: Any,
) -> CompressOptions:
    """合并压缩选项：默认值 < options < 关键字参数"""
    defaults = defaults or ZenOptions()
    values: dict[str, Any] = {
        "quality": defaults.default_quality,
        "format": defaults.default_format,
    }

    match options:
        case CompressOptions():
            values.update(options.model_dump())
        case dict():
            values.update(options)
        case None:
            pass
        case _:
            raise ValidationError("Compression options must be a dict or CompressOptions")

    values.update(overrides)
    _precheck_compression(values)

    try:
        return CompressOptions(**values)
    except PydanticValidationError as e:
        raise ValidationError(_pydantic_message(e)) from e


def _build_model(model_cls: type, value: Any) -> Any:
    if value is None:
        return model_cls()
    if isinstance(value, model_cls):
        return value
    if isinstance(value, dict):
        try:
            return model_cls(**value)
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_message(e)) from e
    raise ValidationError(f"Invalid options type: {type(value).__name__}")


class ImageZen:
    """图像处理门面

    Examples:
        >>> zen = ImageZen()
        >>> data = zen.compress("photo.jpg", quality=70, format="webp")
        >>> zen.enhance("photo.jpg", {"tasks": ["upscale", "compress"]})
    """

    def __init__(self, options: ZenOptions | None = None, **overrides: Any):
        """初始化处理器

        Args:
            options: 运行选项，为 None 时由 overrides 构建
            **overrides: ZenOptions 字段，如 verbose=True
        """
        self.options = options or ZenOptions(**overrides)

        self.remover = BackgroundRemover(self.options)
        self.upscaler = ImageUpscaler(self.options)
        self.compressor = ImageCompressor(self.options)
        self.sequencer = PipelineSequencer(
            self.options,
            remover=self.remover,
            upscaler=self.upscaler,
            compressor=self.compressor,
        )
        self.batch = BatchProcessor(
            self.options,
            compressor=self.compressor,
            upscaler=self.upscaler,
            remover=self.remover,
        )

        logger.debug("初始化 ImageZen")

    def remove_background(
        self,
        input_data: ImageSource,
        options: RemoveBackgroundOptions | dict[str, Any] | None = None,
    ) -> bytes:
        """移除背景，返回 PNG 字节"""
        ImageValidators.validate_input(input_data)
        return self.remover.process(
            input_data, _build_model(RemoveBackgroundOptions, options)
        )

    def upscale(
        self,
        input_data: ImageSource,
        scale: int = 2,
        options: UpscaleOptions | dict[str, Any] | None = None,
    ) -> bytes:
        """放大 2 倍或 4 倍，返回 PNG 字节"""
        ImageValidators.validate_input(input_data)
        scale = ImageValidators.validate_scale(scale)
        return self.upscaler.process(input_data, scale, _build_model(UpscaleOptions, options))

    def compress(
        self,
        input_data: ImageSource,
        options: CompressOptions | dict[str, Any] | None = None,
        **overrides: Any,
    ) -> bytes:
        """压缩图片，返回目标格式的字节

        Args:
            input_data: 文件路径或字节
            options: 压缩选项
            **overrides: 覆盖 options 中的字段，如 quality=70
        """
        ImageValidators.validate_input(input_data)
        resolved = build_compress_options(options, self.options, **overrides)
        return self.compressor.process(input_data, resolved)

    def enhance(
        self,
        input_data: ImageSource,
        config: EnhanceConfig | dict[str, Any] | None = None,
    ) -> bytes | Path:
        """按任务列表依次执行多个处理

        Returns:
            bytes | Path: 指定 output 时写入文件并返回路径，否则返回字节
        """
        ImageValidators.validate_input(input_data)
        enhance_config = self._build_enhance_config(config)

        try:
            stages = parse_tasks(
                enhance_config.tasks,
                scale=enhance_config.scale,
                compression=enhance_config.compression,
                background=enhance_config.background,
                upscaling=enhance_config.upscaling,
            )
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_message(e)) from e

        output_path = None
        if enhance_config.output is not None:
            output_path = ImageValidators.validate_output_path(enhance_config.output)

        result = self.sequencer.execute(load_buffer(input_data), stages)

        if output_path is not None:
            output_path.write_bytes(result.data)
            logger.info(f"已写入: {output_path}")
            return output_path

        return result.data

    def _build_enhance_config(
        self, config: EnhanceConfig | dict[str, Any] | None
    ) -> EnhanceConfig:
        match config:
            case EnhanceConfig():
                values = config.model_dump()
            case dict():
                values = dict(config)
            case None:
                values = {}
            case _:
                raise ValidationError("Enhance config must be a dict or EnhanceConfig")

        tasks = values.get("tasks") or []
        if isinstance(tasks, str):
            tasks = tasks.split(",")
        tasks = [t.strip() for t in tasks if t.strip()]
        values["tasks"] = tasks

        if "upscale" in tasks:
            values["scale"] = ImageValidators.validate_scale(values.get("scale", 2))

        values["compression"] = build_compress_options(
            values.get("compression"), self.options
        )

        try:
            return EnhanceConfig(**values)
        except PydanticValidationError as e:
            raise ValidationError(_pydantic_message(e)) from e

    @staticmethod
    def get_info() -> dict[str, Any]:
        """包信息、支持的格式与功能列表"""
        from . import __version__

        return {
            "name": PACKAGE_NAME,
            "version": __version__,
            "supported_formats": SupportedFormats.as_dict(),
            "features": list(FEATURES),
            "encoders": {fmt: is_encoder_available(fmt) for fmt in SupportedFormats.OUTPUT},
        }


def remove_background(
    input_data: ImageSource,
    options: RemoveBackgroundOptions | dict[str, Any] | None = None,
) -> bytes:
    """移除背景（使用默认配置）"""
    return ImageZen().remove_background(input_data, options)


def upscale(
    input_data: ImageSource,
    scale: int = 2,
    options: UpscaleOptions | dict[str, Any] | None = None,
) -> bytes:
    """放大图片（使用默认配置）"""
    return ImageZen().upscale(input_data, scale, options)


def compress(
    input_data: ImageSource,
    options: CompressOptions | dict[str, Any] | None = None,
    **overrides: Any,
) -> bytes:
    """压缩图片（使用默认配置）"""
    return ImageZen().compress(input_data, options, **overrides)


def enhance(
    input_data: ImageSource, config: EnhanceConfig | dict[str, Any] | None = None
) -> bytes | Path:
    """组合增强（使用默认配置）"""
    return ImageZen().enhance(input_data, config)


def get_info() -> dict[str, Any]:
    """包信息"""
    return ImageZen.get_info()
