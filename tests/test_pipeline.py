"""流水线测试。"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from image_zen.engine.pipeline import Pipeline, PipelineSequencer
from image_zen.exceptions import ProcessingError, UnknownTaskError
from image_zen.models import (
    Compress,
    CompressOptions,
    ImageBuffer,
    PipelineStatus,
    RemoveBackground,
    StageKind,
    UnknownStage,
    Upscale,
    parse_task,
    parse_tasks,
)


class RecordingProcessor:
    """记录调用顺序的假处理器"""

    def __init__(self, name: str, calls: list[str], fail: bool = False):
        self.name = name
        self.calls = calls
        self.fail = fail

    def apply(self, image: ImageBuffer, *args) -> ImageBuffer:
        self.calls.append(self.name)
        if self.fail:
            raise ProcessingError(f"{self.name} exploded")
        return image


@pytest.fixture
def calls() -> list[str]:
    return []


@pytest.fixture
def image(png_bytes) -> ImageBuffer:
    return ImageBuffer.from_bytes(png_bytes((10, 10)))


def make_sequencer(calls: list[str], failing: str | None = None) -> PipelineSequencer:
    return PipelineSequencer(
        remover=RecordingProcessor("removeBackground", calls, failing == "removeBackground"),
        upscaler=RecordingProcessor("upscale", calls, failing == "upscale"),
        compressor=RecordingProcessor("compress", calls, failing == "compress"),
    )


class TestPipelineSequencer:
    """阶段执行器"""

    def test_empty_pipeline_is_identity(self, calls, image):
        sequencer = make_sequencer(calls)

        assert sequencer.execute(image, []) is image
        assert calls == []
        assert sequencer.state.status == PipelineStatus.COMPLETED

    def test_stages_run_in_order(self, calls, image):
        sequencer = make_sequencer(calls)

        sequencer.execute(image, [Compress(), Upscale(scale=4), RemoveBackground()])

        assert calls == ["compress", "upscale", "removeBackground"]
        assert sequencer.state.status == PipelineStatus.COMPLETED
        assert sequencer.state.stage_index == 2

    def test_failure_stops_pipeline(self, calls, image):
        """第 2 个阶段失败时报告该阶段，第 3 个阶段不执行"""
        sequencer = make_sequencer(calls, failing="upscale")

        with pytest.raises(ProcessingError) as exc_info:
            sequencer.execute(image, [RemoveBackground(), Upscale(scale=2), Compress()])

        error = exc_info.value
        assert error.stage == "upscale"
        assert error.stage_index == 1
        assert str(error) == "Pipeline failed at stage 'upscale': upscale exploded"
        assert calls == ["removeBackground", "upscale"]

        assert sequencer.state.status == PipelineStatus.FAILED
        assert sequencer.state.stage_index == 1
        assert sequencer.state.cause == "upscale exploded"

    def test_unknown_stage_fails_at_dispatch(self, calls, image):
        """未识别的阶段在执行到时才报错，前面的阶段照常执行"""
        sequencer = make_sequencer(calls)

        with pytest.raises(UnknownTaskError) as exc_info:
            sequencer.execute(image, [Compress(), Compress(), UnknownStage(tag="blur")])

        assert str(exc_info.value) == "Unknown task: blur"
        assert exc_info.value.stage_index == 2
        assert calls == ["compress", "compress"]
        assert sequencer.state.status == PipelineStatus.FAILED

    def test_unexpected_exception_is_wrapped(self, image):
        class Broken:
            def apply(self, image, *args):
                raise RuntimeError("codec crashed")

        sequencer = PipelineSequencer(compressor=Broken())

        with pytest.raises(ProcessingError, match="stage 'compress': codec crashed"):
            sequencer.execute(image, [Compress()])

    def test_real_processors(self, image, decode):
        """使用真实处理器：放大后压缩为 JPEG"""
        result = PipelineSequencer().execute(
            image,
            [Upscale(scale=2), Compress(options=CompressOptions(format="jpeg", quality=70))],
        )

        img = decode(result.data)
        assert img.format == "JPEG"
        assert img.size == (20, 20)


class TestPipeline:
    """流水线构建器"""

    def test_chaining_and_info(self, calls):
        pipeline = Pipeline(sequencer=make_sequencer(calls))
        pipeline.add(RemoveBackground()).add(Compress())

        info = pipeline.get_info()

        assert info["stage_count"] == 2
        assert [s["name"] for s in info["stages"]] == ["removeBackground", "compress"]

    def test_insert_remove_clear(self, calls):
        pipeline = Pipeline(sequencer=make_sequencer(calls))
        pipeline.add(Compress()).insert(0, Upscale(scale=2)).add(Compress())

        assert [s.name for s in pipeline.stages] == ["upscale", "compress", "compress"]

        pipeline.remove(StageKind.COMPRESS)
        assert [s.name for s in pipeline.stages] == ["upscale"]

        pipeline.remove("upscale")
        assert len(pipeline) == 0

        pipeline.add(Compress()).clear()
        assert len(pipeline) == 0

    def test_clone_is_independent(self, calls, image):
        pipeline = Pipeline(sequencer=make_sequencer(calls)).add(Compress())
        copy = pipeline.clone().add(RemoveBackground())

        assert len(pipeline) == 1
        assert len(copy) == 2

        copy.execute(image)
        assert calls == ["compress", "removeBackground"]
        assert pipeline.state.status == PipelineStatus.COMPLETED


class TestStages:
    """阶段模型与解析"""

    def test_upscale_scale_validation(self):
        with pytest.raises(PydanticValidationError):
            Upscale(scale=3)

    def test_parse_known_tasks(self):
        stages = parse_tasks("remove-bg, upscale,compress", scale=4)

        assert [s.kind for s in stages] == [
            StageKind.REMOVE_BACKGROUND,
            StageKind.UPSCALE,
            StageKind.COMPRESS,
        ]
        assert stages[1].scale == 4

    def test_parse_unknown_task(self):
        stage = parse_task("sharpen")

        assert isinstance(stage, UnknownStage)
        assert stage.name == "sharpen"

    def test_compress_stage_properties(self):
        stage = Compress(options=CompressOptions(format="mozjpeg", quality=60))

        assert stage.format == "jpeg"
        assert stage.quality == 60
