"""处理引擎模块。

包含流水线执行与批量处理。
"""

from .batch import BatchProcessor
from .pipeline import Pipeline, PipelineSequencer


__all__ = [
    "BatchProcessor",
    "Pipeline",
    "PipelineSequencer",
]
