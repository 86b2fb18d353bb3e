"""配置与日志测试。"""

import logging

import pytest

from image_zen import ImageZen
from image_zen.config import ZenOptions, get_config, reset_config
from image_zen.utils.logging_helpers import PACKAGE_LOGGER, configure_logging


class TestAppConfig:
    """环境变量覆盖"""

    def test_defaults(self):
        config = get_config()

        assert config.compression.DEFAULT_QUALITY == 80
        assert config.compression.DEFAULT_FORMAT == "webp"
        assert config.logging.LOG_LEVEL == "WARNING"

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IZ_DEFAULT_QUALITY", "65")
        monkeypatch.setenv("IZ_DEFAULT_FORMAT", "PNG")
        monkeypatch.setenv("IZ_LOG_LEVEL", "info")
        monkeypatch.setenv("IZ_ENABLE_FILE_LOGGING", "yes")
        reset_config()

        config = get_config()
        assert config.compression.DEFAULT_QUALITY == 65
        assert config.compression.DEFAULT_FORMAT == "png"
        assert config.logging.LOG_LEVEL == "INFO"
        assert config.logging.ENABLE_FILE_LOGGING is True

    def test_zen_options_follow_config(self, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.setenv("IZ_DEFAULT_QUALITY", "55")
        reset_config()

        options = ZenOptions(verbose=True)
        assert options.default_quality == 55
        assert options.verbose is True

    def test_zen_options_are_frozen(self):
        options = ZenOptions()
        with pytest.raises(AttributeError):
            options.verbose = True  # type: ignore[misc]

    def test_env_default_format_used_by_compress(
        self, monkeypatch: pytest.MonkeyPatch, sample_images, decode
    ):
        monkeypatch.setenv("IZ_DEFAULT_FORMAT", "png")
        reset_config()

        data = ImageZen().compress(sample_images["tiny"])
        assert decode(data).format == "PNG"


class TestConfigureLogging:
    """包级日志配置"""

    def test_verbose_forces_debug(self):
        configure_logging("ERROR", verbose=True)
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.DEBUG

    def test_explicit_level(self):
        configure_logging("info")
        assert logging.getLogger(PACKAGE_LOGGER).level == logging.INFO

    def test_no_duplicate_handlers(self):
        configure_logging()
        configure_logging()

        root = logging.getLogger(PACKAGE_LOGGER)
        assert sum(isinstance(h, logging.StreamHandler) for h in root.handlers) == 1
