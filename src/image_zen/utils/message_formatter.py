"""消息格式化工具模块。

提供统一的错误消息、成功消息格式化功能。
"""

from pathlib import Path


class MessageFormatter:
    """统一的消息格式化器"""

    @staticmethod
    def path_not_directory(path: str | Path) -> str:
        """路径不是目录错误消息"""
        return f"Path is not a directory: {path}"

    @staticmethod
    def operation_failed(
        operation: str, target: str | Path, error: Exception | None = None
    ) -> str:
        """操作失败消息"""
        msg = f"{operation} failed: {target}"
        if error:
            msg += f" - {error}"
        return msg

    @staticmethod
    def stage_failed(stage: str, error: Exception | str) -> str:
        """流水线阶段失败消息"""
        return f"Pipeline failed at stage '{stage}': {error}"

    @staticmethod
    def format_error(operation: str, path: str | Path, error: Exception) -> str:
        """格式化通用错误消息"""
        return f"{operation} failed [{path}]: {error}"
