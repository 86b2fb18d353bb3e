"""工具模块包。

提供纯工具函数，不包含业务逻辑。
"""

# 从文件助手模块导入
from .file_helpers import expand_input, find_image_files, is_glob_pattern

# 从日志工具模块导入
from .logging_helpers import configure_logging, get_logger

# 从消息格式化模块导入
from .message_formatter import MessageFormatter

# 从命名助手模块导入
from .naming_helpers import OutputSuffix, generate_output_name, resolve_output_path


__all__ = [
    "MessageFormatter",
    "OutputSuffix",
    "configure_logging",
    "expand_input",
    "find_image_files",
    "generate_output_name",
    "get_logger",
    "is_glob_pattern",
    "resolve_output_path",
]
