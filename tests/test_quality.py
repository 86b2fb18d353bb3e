"""质量估算测试。"""

import logging
import math
from pathlib import Path

import pytest
from PIL import Image

from image_zen.core.quality import QualityEstimator, compute_channel_stats
from image_zen.models import ChannelStats


@pytest.fixture
def estimator() -> QualityEstimator:
    return QualityEstimator()


class TestEstimate:
    """estimate 的各个调整分支"""

    def test_photo_webp(self, estimator: QualityEstimator):
        """照片：85，复杂度中等不调整，中等大小，webp +5"""
        stats = ChannelStats(stdevs=[60, 60, 60], entropy=7.5)
        assert estimator.estimate(stats, False, 500 * 1024, "webp") == 90

    def test_simple_graphic_small_jpeg(self, estimator: QualityEstimator):
        """图形：92，低复杂度 -12，小文件 +5，jpeg 不调整"""
        stats = ChannelStats(stdevs=[5], entropy=1)
        assert estimator.estimate(stats, False, 50 * 1024, "jpeg") == 85

    def test_clamped_to_upper_bound(self, estimator: QualityEstimator):
        """高复杂度 +8，大文件 -5，avif +10 后截断到 95"""
        stats = ChannelStats(stdevs=[100, 100, 100], entropy=8)
        assert estimator.estimate(stats, False, 3 * 1024 * 1024, "avif") == 95

    def test_large_flat_image(self, estimator: QualityEstimator):
        stats = ChannelStats(stdevs=[0], entropy=0)
        assert estimator.estimate(stats, False, 3 * 1024 * 1024, "jpg") == 75

    def test_encoder_alias(self, estimator: QualityEstimator):
        """mozjpeg 按 jpeg 处理"""
        stats = ChannelStats(stdevs=[60, 60, 60], entropy=7.5)
        assert estimator.estimate(stats, False, 500 * 1024, "mozjpeg") == 85

    @pytest.mark.parametrize("fmt", ["png", "oxipng", "PNG"])
    def test_lossless_branch(self, estimator: QualityEstimator, fmt: str):
        """png 直接返回，不经过其他调整"""
        stats = ChannelStats(stdevs=[100, 100, 100], entropy=8)
        assert estimator.estimate(stats, True, 10, fmt) == 100
        assert estimator.estimate(stats, False, 10, fmt) == 95

    def test_result_range(self, estimator: QualityEstimator):
        """任意有限统计值的结果都在 [50, 95]"""
        for stdev in (0, 10, 26, 50, 90, 127):
            for entropy in (0, 3, 6.5, 8):
                for size in (1, 200 * 1024, 10 * 1024 * 1024):
                    for fmt in ("webp", "avif", "jpeg", "bmp"):
                        q = estimator.estimate(
                            ChannelStats(stdevs=[stdev], entropy=entropy), False, size, fmt
                        )
                        assert isinstance(q, int)
                        assert 50 <= q <= 95


class TestAnalyze:
    """analyze 返回报告"""

    def test_report_fields(self, estimator: QualityEstimator):
        stats = ChannelStats(stdevs=[60, 60, 60], entropy=7.5)
        report = estimator.analyze(stats, False, 500 * 1024, "webp")

        assert report.is_photographic
        assert math.isclose(report.complexity_score, 0.42 + 0.28125)
        assert report.recommended_quality == 90

    def test_complexity_is_clamped(self, estimator: QualityEstimator):
        stats = ChannelStats(stdevs=[255, 255, 255], entropy=8)
        assert estimator.analyze(stats, False, 1, "webp").complexity_score == 1.0


class TestChannelStats:
    """通道统计"""

    def test_flat_image(self):
        stats = compute_channel_stats(Image.new("RGB", (16, 16), color=(10, 20, 30)))
        assert stats.stdevs == [0.0, 0.0, 0.0]
        assert stats.entropy == 0.0

    def test_alpha_band_included(self):
        stats = compute_channel_stats(Image.new("RGBA", (8, 8), color=(1, 2, 3, 4)))
        assert len(stats.stdevs) == 4

    def test_two_level_entropy(self):
        """黑白各半的图片熵为 1 比特"""
        img = Image.new("L", (2, 2))
        img.putdata([0, 0, 255, 255])
        stats = compute_channel_stats(img)
        assert math.isclose(stats.entropy, 1.0)
        assert math.isclose(stats.stdevs[0], 127.5)


class TestOptimalQuality:
    """从图片读取统计信息"""

    def test_from_file(self, estimator: QualityEstimator, sample_images: dict[str, Path]):
        quality = estimator.optimal_quality(sample_images["photo"], "webp")
        assert 50 <= quality <= 95

    def test_png_with_alpha(self, estimator: QualityEstimator, sample_images: dict[str, Path]):
        assert estimator.optimal_quality(sample_images["transparent"], "png") == 100

    def test_fallback_on_unreadable_input(self, estimator: QualityEstimator):
        assert estimator.optimal_quality(b"not an image", "webp") == 80

    def test_fallback_on_missing_file(self, estimator: QualityEstimator, temp_dir: Path):
        assert estimator.optimal_quality(temp_dir / "missing.jpg", "webp") == 80

    def test_logs_quality_report(
        self, estimator: QualityEstimator, sample_images: dict[str, Path], caplog
    ):
        """每次估算都生成质量报告并记录到调试日志"""
        caplog.set_level(logging.DEBUG, logger="image_zen.core.quality")

        quality = estimator.optimal_quality(sample_images["tiny"], "webp")

        assert quality == 90
        assert "is_photographic=False" in caplog.text
        assert "recommended_quality=90" in caplog.text
