"""图像处理 MCP 服务器。

把压缩、放大、背景移除和组合增强暴露为 MCP 工具，结果写入磁盘并返回结构化字典。

工具函数在模块末尾通过 mcp.tool()(fn) 注册而不使用装饰器：
装饰器会把函数替换为工具对象，这里保留原函数以便直接调用和测试。
"""

from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from .api import ImageZen
from .exceptions import ProcessingError, ValidationError
from .models.constants import normalize_format
from .models.options import ImageValidators
from .models.results import BaseResult
from .utils.logging_helpers import configure_logging, get_logger
from .utils.message_formatter import MessageFormatter
from .utils.naming_helpers import OutputSuffix, resolve_output_path


# MCP 服务器响应类型定义
MCPResponse = dict[str, Any]


class MCPResponseBuilder:
    """MCP 服务器响应构建器，专门用于构建符合 MCP 协议的响应格式。"""

    @staticmethod
    def error(
        message: str,
        error_type: str = "general",
        details: dict[str, Any] | None = None,
    ) -> MCPResponse:
        """构建错误结果。

        Args:
            message: 错误消息
            error_type: 错误类型
            details: 额外的错误详情

        Returns:
            dict: 标准化的错误响应
        """
        result: MCPResponse = {
            "success": False,
            "error": message,
            "error_type": error_type,
        }

        if details:
            result["details"] = details

        return result

    @staticmethod
    def validation_error(message: str) -> MCPResponse:
        """构建验证错误结果。"""
        return MCPResponseBuilder.error(message=message, error_type="validation")

    @staticmethod
    def processing_error(message: str, stage: str | None = None) -> MCPResponse:
        """构建处理错误结果，流水线失败时附带阶段名。"""
        details = {"stage": stage} if stage else None
        return MCPResponseBuilder.error(
            message=message,
            error_type="processing",
            details=details,
        )

    @staticmethod
    def from_exception(error: Exception, operation: str, target: str) -> MCPResponse:
        """把异常转换为错误响应"""
        match error:
            case ValidationError():
                logger.warning(MessageFormatter.format_error(operation, target, error))
                return MCPResponseBuilder.validation_error(error.message)
            case ProcessingError():
                logger.error(MessageFormatter.format_error(operation, target, error))
                return MCPResponseBuilder.processing_error(error.message, error.stage)
            case _:
                logger.error(MessageFormatter.operation_failed(operation, target, error))
                return MCPResponseBuilder.error(str(error))

    @staticmethod
    def written(input_path: Path, output_path: Path, data: bytes, **extra: Any) -> MCPResponse:
        """构建写入成功的结果"""
        original_size = input_path.stat().st_size
        output_size = len(data)
        ratio = (1 - output_size / original_size) * 100 if original_size else 0.0
        return {
            "success": True,
            "input_path": str(input_path),
            "output_path": str(output_path),
            "original_size": original_size,
            "output_size": output_size,
            "output_size_human": BaseResult.format_size(output_size),
            "compression_ratio": round(ratio, 2),
            **extra,
        }


logger = get_logger()

# 创建MCP应用
mcp: FastMCP[Any] = FastMCP("image-zen 图像处理服务")

# 全局处理实例
zen = ImageZen()


def _write(input_path: str, output_path: str | None, fmt: str, suffix: str, data: bytes) -> Path:
    target = resolve_output_path(input_path, output_path, fmt, suffix)
    ImageValidators.validate_output_path(target)
    target.write_bytes(data)
    logger.info(f"已写入: {target}")
    return target


def compress_image(
    input_path: str,
    output_path: str | None = None,
    quality: int | None = 80,
    format: str = "webp",
    max_width: int | None = None,
    max_height: int | None = None,
) -> MCPResponse:
    """压缩图片并写入磁盘

    Args:
        input_path: 输入图像文件路径
        output_path: 输出文件或目录（可选，默认与输入同目录，文件名加 _compressed）
        quality: 压缩质量 1-100，None 为按内容估算
        format: 输出格式 webp/avif/jpeg/jpg/png
        max_width: 最大宽度限制（像素）
        max_height: 最大高度限制（像素）
    """
    try:
        options = {
            "quality": quality,
            "format": format,
            "max_width": max_width,
            "max_height": max_height,
        }
        data = zen.compress(input_path, options)
        fmt = normalize_format(format)
        target = _write(input_path, output_path, fmt, OutputSuffix.COMPRESS, data)
        return MCPResponseBuilder.written(Path(input_path), target, data, format=fmt)
    except Exception as e:
        return MCPResponseBuilder.from_exception(e, "压缩", input_path)


def upscale_image(
    input_path: str,
    scale: int = 2,
    output_path: str | None = None,
) -> MCPResponse:
    """放大图片 2 倍或 4 倍，输出 PNG

    Args:
        input_path: 输入图像文件路径
        scale: 放大倍数，2 或 4
        output_path: 输出文件或目录（可选）
    """
    try:
        data = zen.upscale(input_path, scale)
        target = _write(input_path, output_path, "png", OutputSuffix.upscale(scale), data)
        return MCPResponseBuilder.written(Path(input_path), target, data, scale=scale)
    except Exception as e:
        return MCPResponseBuilder.from_exception(e, "放大", input_path)


def remove_background(
    input_path: str,
    output_path: str | None = None,
    strategy: str = "radial",
) -> MCPResponse:
    """移除背景，输出带透明通道的 PNG

    Args:
        input_path: 输入图像文件路径
        output_path: 输出文件或目录（可选）
        strategy: 分割策略 radial 或 blended
    """
    try:
        data = zen.remove_background(input_path, {"strategy": strategy})
        target = _write(input_path, output_path, "png", OutputSuffix.REMOVE_BACKGROUND, data)
        return MCPResponseBuilder.written(Path(input_path), target, data, strategy=strategy)
    except Exception as e:
        return MCPResponseBuilder.from_exception(e, "背景移除", input_path)


def enhance_image(
    input_path: str,
    tasks: list[str] | str = "compress",
    output_path: str | None = None,
    scale: int = 2,
    quality: int = 80,
    format: str = "webp",
) -> MCPResponse:
    """按任务列表依次处理图片

    Args:
        input_path: 输入图像文件路径
        tasks: 任务列表或逗号分隔字符串：remove-bg, upscale, compress
        output_path: 输出文件或目录（可选，文件名加 _enhanced）
        scale: 放大倍数
        quality: 压缩质量
        format: 压缩输出格式
    """
    try:
        target = resolve_output_path(
            input_path, output_path, normalize_format(format), OutputSuffix.ENHANCE
        )
        written = zen.enhance(
            input_path,
            {
                "tasks": tasks,
                "scale": scale,
                "compression": {"quality": quality, "format": format},
                "output": target,
            },
        )
        written_path = Path(written)
        data = written_path.read_bytes()
        return MCPResponseBuilder.written(Path(input_path), written_path, data, tasks=tasks)
    except Exception as e:
        return MCPResponseBuilder.from_exception(e, "组合增强", input_path)


def get_info() -> MCPResponse:
    """包信息、支持的格式与功能列表"""
    return {"success": True, **ImageZen.get_info()}


for _tool in (compress_image, upscale_image, remove_background, enhance_image, get_info):
    mcp.tool()(_tool)


# ============================================================================
# 应用入口
# ============================================================================


def main() -> None:
    """启动 MCP 服务器"""
    configure_logging("INFO")
    logger.info("启动 image-zen MCP 服务器")
    mcp.run()


if __name__ == "__main__":
    main()
