"""批量处理器模块。

按顺序处理文件列表，单个文件失败时记录为失败项，不中断整个批次。
"""

import time
from collections.abc import Callable, Sequence
from pathlib import Path

from ..config import ZenOptions
from ..core.background import BackgroundRemover
from ..core.compressor import ImageCompressor
from ..core.upscaler import ImageUpscaler
from ..exceptions import ErrorHandler
from ..models.options import CompressOptions, RemoveBackgroundOptions, UpscaleOptions
from ..models.results import BatchItemResult, BatchResult
from ..utils.logging_helpers import get_logger


logger = get_logger()

ProgressCallback = Callable[[int, int, BatchItemResult], None]


class BatchProcessor:
    """批量图像处理器

    只做顺序处理；每处理完一个文件调用一次进度回调 (已完成数, 总数, 结果项)。
    """

    def __init__(
        self,
        options: ZenOptions | None = None,
        compressor: ImageCompressor | None = None,
        upscaler: ImageUpscaler | None = None,
        remover: BackgroundRemover | None = None,
    ):
        self.options = options or ZenOptions()
        self.compressor = compressor or ImageCompressor(self.options)
        self.upscaler = upscaler or ImageUpscaler(self.options)
        self.remover = remover or BackgroundRemover(self.options)

    def compress(
        self,
        files: Sequence[str | Path],
        options: CompressOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """批量压缩，未指定质量时为每个文件估算质量，回调中附带预计剩余秒数"""
        options = options or CompressOptions(
            quality=None, format=self.options.default_format
        )

        def compress_one(file: Path) -> BatchItemResult:
            original_size = file.stat().st_size
            resolved = self.compressor.resolve_options(file, options)
            data = self.compressor.process(file, resolved)
            return BatchItemResult(
                file=file,
                success=True,
                data=data,
                original_size=original_size,
                output_size=len(data),
                quality=resolved.quality,
            )

        return self._run("compress", files, compress_one, progress, with_eta=True)

    def upscale(
        self,
        files: Sequence[str | Path],
        scale: int = 2,
        options: UpscaleOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """批量放大"""

        def upscale_one(file: Path) -> BatchItemResult:
            data = self.upscaler.process(file, scale, options)
            return BatchItemResult(
                file=file,
                success=True,
                data=data,
                original_size=file.stat().st_size,
                output_size=len(data),
                scale=scale,
            )

        return self._run("upscale", files, upscale_one, progress, scale=scale)

    def remove_background(
        self,
        files: Sequence[str | Path],
        options: RemoveBackgroundOptions | None = None,
        progress: ProgressCallback | None = None,
    ) -> BatchResult:
        """批量移除背景"""

        def remove_one(file: Path) -> BatchItemResult:
            data = self.remover.process(file, options)
            return BatchItemResult(
                file=file,
                success=True,
                data=data,
                original_size=file.stat().st_size,
                output_size=len(data),
            )

        return self._run("remove-bg", files, remove_one, progress)

    def _run(
        self,
        operation: str,
        files: Sequence[str | Path],
        handler: Callable[[Path], BatchItemResult],
        progress: ProgressCallback | None,
        with_eta: bool = False,
        **failure_fields,
    ) -> BatchResult:
        results: list[BatchItemResult] = []
        total = len(files)
        started = time.perf_counter()

        for index, file in enumerate(files):
            path = Path(file)
            try:
                item = handler(path)
            except Exception as e:
                item = ErrorHandler.create_failed_item(e, path, operation, **failure_fields)

            if with_eta and item.success:
                elapsed = time.perf_counter() - started
                remaining = elapsed / (index + 1) * (total - index - 1)
                item = item.model_copy(update={"eta": round(remaining)})

            results.append(item)

            if progress is not None:
                progress(index + 1, total, item)

        batch = BatchResult(
            operation=operation,
            results=results,
            success=all(r.success for r in results),
        )
        logger.info(batch.get_summary())
        return batch
