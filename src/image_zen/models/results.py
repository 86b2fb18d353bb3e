"""处理结果模型。

定义批量处理与流水线执行的结果数据结构。
"""

from enum import Enum
from pathlib import Path
from typing import Any

from humanize import naturalsize
from pydantic import BaseModel, Field


class BaseResult(BaseModel):
    """结果基类，包含通用字段和方法"""

    success: bool = Field(description="是否成功")
    error: str | None = Field(None, description="错误信息")

    @staticmethod
    def format_size(size_bytes: int) -> str:
        """格式化文件大小为人类可读格式"""
        return naturalsize(size_bytes, binary=True)


class BatchItemResult(BaseResult):
    """批量处理中单个文件的结果"""

    file: Path = Field(description="输入文件路径")
    data: bytes | None = Field(None, description="处理后的图像字节", repr=False)
    original_size: int | None = Field(None, description="原始文件大小（字节）")
    output_size: int | None = Field(None, description="输出大小（字节）")
    quality: int | None = Field(None, description="使用的质量值")
    scale: int | None = Field(None, description="放大倍数")
    eta: int | None = Field(None, description="预计剩余秒数")

    def get_compression_ratio(self) -> float:
        """压缩比例（百分比），保留两位小数"""
        if not self.original_size or self.output_size is None:
            return 0.0
        return round((1 - self.output_size / self.original_size) * 100, 2)

    def get_summary(self) -> str:
        """结果摘要"""
        if not self.success:
            return f"failed: {self.error}"
        if self.original_size and self.output_size is not None:
            return (
                f"{self.format_size(self.original_size)} → "
                f"{self.format_size(self.output_size)} "
                f"({self.get_compression_ratio():.1f}% smaller)"
            )
        return "ok"


class ResultCollection(BaseResult):
    """结果集合基类，提供通用的统计方法"""

    results: list[Any] = Field(description="结果列表")

    def get_successful_items(self) -> list[Any]:
        """获取成功的结果项"""
        return [r for r in self.results if getattr(r, "success", False)]

    def get_failed_items(self) -> list[Any]:
        """获取失败的结果项"""
        return [r for r in self.results if not getattr(r, "success", False)]

    def get_total_count(self) -> int:
        return len(self.results)

    def get_success_count(self) -> int:
        return len(self.get_successful_items())

    def get_failure_count(self) -> int:
        return len(self.get_failed_items())

    def get_success_rate(self) -> float:
        """获取成功率（百分比）"""
        total = self.get_total_count()
        if total == 0:
            return 0.0
        return (self.get_success_count() / total) * 100


class BatchResult(ResultCollection):
    """批量处理结果"""

    operation: str = Field(description="操作名称")
    results: list[BatchItemResult] = Field(description="所有文件的处理结果")

    def get_total_output_size(self) -> int:
        return sum(r.output_size or 0 for r in self.results if r.success)

    def get_summary(self) -> str:
        """批量处理摘要"""
        total = self.get_total_count()
        successful = self.get_success_count()
        return (
            f"{self.operation}: {successful}/{total} files "
            f"({self.get_success_rate():.1f}% succeeded), "
            f"output {self.format_size(self.get_total_output_size())}"
        )


class PipelineStatus(str, Enum):
    """流水线状态"""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


class PipelineState(BaseModel):
    """流水线执行状态"""

    status: PipelineStatus = PipelineStatus.PENDING
    stage_index: int | None = Field(None, description="当前或失败的阶段序号")
    cause: str | None = Field(None, description="失败原因")
