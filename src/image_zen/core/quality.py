"""压缩质量估算模块。

根据通道标准差、灰度熵、文件大小和目标格式推导压缩质量。
估算是纯函数，同样的统计信息总是得到同样的结果。
"""

import numpy as np
from PIL import Image

from ..config import ZenOptions, get_config
from ..models.constants import normalize_format
from ..models.image_buffer import ChannelStats, QualityReport
from ..utils.logging_helpers import get_logger
from .codec import ImageSource, open_image, source_size


logger = get_logger()

# 判定为照片的阈值
PHOTO_STDEV_THRESHOLD = 25
PHOTO_ENTROPY_THRESHOLD = 6

# 基础质量
PHOTO_BASE_QUALITY = 85
GRAPHIC_BASE_QUALITY = 92

# 复杂度调整
HIGH_COMPLEXITY = 0.8
LOW_COMPLEXITY = 0.3

# 格式调整，png 为无损格式单独处理
FORMAT_ADJUSTMENTS: dict[str, int] = {
    "webp": 5,
    "avif": 10,
    "jpeg": 0,
    "jpg": 0,
}

MIN_QUALITY = 50
MAX_QUALITY = 95


def compute_channel_stats(img: Image.Image) -> ChannelStats:
    """计算各通道标准差和灰度直方图熵

    调色板图片先转换为 RGB/RGBA，透明通道参与标准差计算。
    """
    if img.mode == "P":
        img = img.convert("RGBA" if "transparency" in img.info else "RGB")
    elif img.mode not in ("L", "LA", "RGB", "RGBA"):
        img = img.convert("RGB")

    arr = np.asarray(img, dtype=np.float64)
    if arr.ndim == 2:
        arr = arr[..., np.newaxis]

    stdevs = [float(np.std(arr[..., band])) for band in range(arr.shape[2])]

    # 灰度直方图的香农熵
    histogram = np.asarray(img.convert("L").histogram(), dtype=np.float64)
    probabilities = histogram[histogram > 0] / histogram.sum()
    entropy = float(-np.sum(probabilities * np.log2(probabilities)))

    return ChannelStats(stdevs=stdevs, entropy=max(0.0, entropy))


class QualityEstimator:
    """压缩质量估算器"""

    def __init__(self, options: ZenOptions | None = None):
        self.options = options or ZenOptions()
        self._thresholds = get_config().compression

    @staticmethod
    def is_photographic(stats: ChannelStats) -> bool:
        """颜色变化大且熵高的图片视为照片"""
        return (
            stats.mean_stdev > PHOTO_STDEV_THRESHOLD
            and stats.entropy > PHOTO_ENTROPY_THRESHOLD
        )

    @staticmethod
    def complexity(stats: ChannelStats) -> float:
        """复杂度评分，范围 [0, 1]"""
        score = (stats.mean_stdev / 100) * 0.7 + (stats.entropy / 8) * 0.3
        return min(1.0, max(0.0, score))

    def estimate(
        self,
        stats: ChannelStats,
        has_alpha: bool,
        file_size_bytes: int,
        target_format: str = "webp",
    ) -> int:
        """估算推荐的压缩质量

        Args:
            stats: 通道统计信息
            has_alpha: 是否有透明通道
            file_size_bytes: 原始文件字节数
            target_format: 目标格式

        Returns:
            int: 有损格式返回 [50, 95]；png 返回 100（有透明）或 95
        """
        fmt = normalize_format(target_format)

        # 无损格式直接返回
        if fmt == "png":
            return 100 if has_alpha else 95

        quality = PHOTO_BASE_QUALITY if self.is_photographic(stats) else GRAPHIC_BASE_QUALITY

        complexity = self.complexity(stats)
        if complexity > HIGH_COMPLEXITY:
            quality += 8
        elif complexity < LOW_COMPLEXITY:
            quality -= 12

        if file_size_bytes > self._thresholds.LARGE_FILE_BYTES:
            quality -= 5
        elif file_size_bytes < self._thresholds.SMALL_FILE_BYTES:
            quality += 5

        quality += FORMAT_ADJUSTMENTS.get(fmt, 0)

        return int(max(MIN_QUALITY, min(MAX_QUALITY, round(quality))))

    def analyze(
        self,
        stats: ChannelStats,
        has_alpha: bool,
        file_size_bytes: int,
        target_format: str = "webp",
    ) -> QualityReport:
        """以报告形式返回估算结果"""
        return QualityReport(
            is_photographic=self.is_photographic(stats),
            complexity_score=self.complexity(stats),
            recommended_quality=self.estimate(
                stats, has_alpha, file_size_bytes, target_format
            ),
        )

    def optimal_quality(self, source: ImageSource, target_format: str = "webp") -> int:
        """读取图片并估算质量，任何失败都返回回退质量"""
        try:
            with open_image(source, exif_transpose=False) as img:
                stats = compute_channel_stats(img)
                has_alpha = "A" in img.getbands() or "transparency" in img.info
            report = self.analyze(stats, has_alpha, source_size(source), target_format)
            logger.debug(f"质量报告 ({target_format}): {report!r}")
            return report.recommended_quality
        except Exception as e:
            logger.warning(f"质量估算失败，使用回退值 {self.options.fallback_quality}: {e}")
            return self.options.fallback_quality
