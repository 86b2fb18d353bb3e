"""统一配置管理模块。

提供应用程序的默认配置、环境变量覆盖，以及注入到各处理器的不可变运行选项。
"""

import os
from dataclasses import dataclass, field, replace


@dataclass(frozen=True)
class CompressionDefaults:
    """压缩相关的默认配置"""

    # 质量设置
    DEFAULT_QUALITY: int = 80
    DEFAULT_FORMAT: str = "webp"
    FALLBACK_QUALITY: int = 80

    # 质量估算阈值
    LARGE_FILE_BYTES: int = 2 * 1024 * 1024
    SMALL_FILE_BYTES: int = 100 * 1024


@dataclass(frozen=True)
class LoggingDefaults:
    """日志相关的默认配置"""

    # 日志级别
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # 文件日志
    ENABLE_FILE_LOGGING: bool = False
    LOG_FILE_PATH: str = "image_zen.log"
    LOG_FILE_MAX_SIZE: int = 10 * 1024 * 1024  # 10MB
    LOG_FILE_BACKUP_COUNT: int = 5


class AppConfig:
    """应用程序配置管理器

    支持环境变量覆盖默认配置
    """

    def __init__(self):
        self.compression = CompressionDefaults()
        self.logging = LoggingDefaults()

        # 从环境变量加载配置
        self._load_from_env()

    def _load_from_env(self):
        """从环境变量加载配置"""
        if quality := os.getenv("IZ_DEFAULT_QUALITY"):
            self.compression = replace(self.compression, DEFAULT_QUALITY=int(quality))

        if fmt := os.getenv("IZ_DEFAULT_FORMAT"):
            self.compression = replace(self.compression, DEFAULT_FORMAT=fmt.lower())

        if log_level := os.getenv("IZ_LOG_LEVEL"):
            self.logging = replace(self.logging, LOG_LEVEL=log_level.upper())

        if enable_file_log := os.getenv("IZ_ENABLE_FILE_LOGGING"):
            self.logging = replace(
                self.logging,
                ENABLE_FILE_LOGGING=enable_file_log.lower() in ("true", "1", "yes"),
            )

        if log_file := os.getenv("IZ_LOG_FILE_PATH"):
            self.logging = replace(self.logging, LOG_FILE_PATH=log_file)


@dataclass(frozen=True)
class ZenOptions:
    """注入到各处理器的不可变运行选项

    每个处理器在构造时接收一份，实例之间不共享可变状态。
    """

    verbose: bool = False
    default_quality: int = field(
        default_factory=lambda: get_config().compression.DEFAULT_QUALITY
    )
    default_format: str = field(
        default_factory=lambda: get_config().compression.DEFAULT_FORMAT
    )
    fallback_quality: int = field(
        default_factory=lambda: get_config().compression.FALLBACK_QUALITY
    )


# 全局配置实例
config = AppConfig()


def get_config() -> AppConfig:
    """获取全局配置实例"""
    return config


def reset_config():
    """重置配置（主要用于测试）"""
    global config
    config = AppConfig()
