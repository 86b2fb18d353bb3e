"""图像处理异常模块。

定义统一的异常类和错误处理机制，包含异常转换装饰器。
"""

from collections.abc import Callable
from functools import wraps
from pathlib import Path
from typing import TypeVar

from PIL.Image import DecompressionBombError, UnidentifiedImageError

from .models.results import BatchItemResult
from .utils.logging_helpers import get_logger
from .utils.message_formatter import MessageFormatter


logger = get_logger()
T = TypeVar("T")


class ImageZenError(Exception):
    """图像处理错误基类"""

    def __init__(self, message: str, input_path: Path | None = None):
        super().__init__(message)
        self.message = message
        self.input_path = input_path


class ValidationError(ImageZenError):
    """参数验证错误，总是在处理开始前抛出"""

    pass


class ProcessingError(ImageZenError):
    """处理过程错误

    在流水线内抛出时携带失败阶段的名称和序号。
    """

    def __init__(
        self,
        message: str,
        input_path: Path | None = None,
        stage: str | None = None,
        stage_index: int | None = None,
    ):
        super().__init__(message, input_path)
        self.stage = stage
        self.stage_index = stage_index


class UnknownTaskError(ProcessingError):
    """未识别的流水线任务"""

    def __init__(self, task: str, stage_index: int | None = None):
        super().__init__(
            f"Unknown task: {task}", stage=task, stage_index=stage_index
        )
        self.task = task


def handle_image_errors(operation_name: str = "Image processing"):
    """统一的图像处理异常转换装饰器

    已经是 ImageZenError 的异常原样抛出，其余异常转换为 ProcessingError。

    Args:
        operation_name: 操作名称，用于日志和错误消息
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            try:
                return func(*args, **kwargs)
            except ImageZenError:
                raise
            except UnidentifiedImageError as e:
                logger.error(f"{operation_name} - 无法识别图像格式: {e}")
                raise ProcessingError(
                    f"{operation_name} failed: cannot identify image ({e})"
                ) from e
            except DecompressionBombError as e:
                logger.error(f"{operation_name} - 图像过大: {e}")
                raise ProcessingError(
                    f"{operation_name} failed: image too large ({e})"
                ) from e
            except OSError as e:
                logger.error(f"{operation_name} - 文件或编解码操作失败: {e}")
                raise ProcessingError(f"{operation_name} failed: {e}") from e
            except Exception as e:
                logger.error(f"{operation_name} - 未知错误: {e}")
                raise ProcessingError(f"{operation_name} failed: {e}") from e

        return wrapper

    return decorator


class ErrorHandler:
    """统一错误处理器

    批量处理时把异常转换为失败的结果项，而不是中断整个批次。
    """

    @staticmethod
    def _log_error(
        operation: str, path: Path, error: Exception, level: str = "error"
    ) -> None:
        """标准化的错误日志记录

        Args:
            operation: 操作名称
            path: 相关文件路径
            error: 异常对象
            level: 日志级别 ("error", "warning", "debug")
        """
        log_msg = MessageFormatter.format_error(operation, path, error)
        getattr(logger, level, logger.error)(log_msg)

    @staticmethod
    def create_failed_item(
        error: Exception, file: Path, operation: str, **fields
    ) -> BatchItemResult:
        """创建失败的批量结果项，验证错误按 warning 级别记录"""
        match error:
            case ValidationError():
                ErrorHandler._log_error(operation, file, error, "warning")
            case _:
                ErrorHandler._log_error(operation, file, error, "error")

        message = error.message if isinstance(error, ImageZenError) else str(error)
        return BatchItemResult(file=file, success=False, error=message, **fields)
