"""蒙版合成测试。"""

import math

import numpy as np
import pytest
from PIL import Image

from image_zen.core.masks import MaskStyle, MaskSynthesizer, radial_alpha
from image_zen.core.segmentation import BlendedHeuristic, RadialFallback, get_strategy
from image_zen.models import Mask, SegmentationMode


@pytest.fixture
def synthesizer() -> MaskSynthesizer:
    return MaskSynthesizer()


def constant_mask(value: int, size: tuple[int, int] = (4, 3)) -> Mask:
    width, height = size
    return Mask(
        width=width,
        height=height,
        values=np.full((height, width), value, dtype=np.uint8),
    )


class TestRadialAlpha:
    """径向透明度函数"""

    def test_core_is_opaque(self):
        assert radial_alpha(0) == 255
        assert radial_alpha(0.6) == 255

    def test_linear_falloff(self):
        assert radial_alpha(1.0) == 102  # 255 * 0.4
        assert radial_alpha(1.4) == 0

    def test_corner_distance_is_transparent(self):
        assert radial_alpha(math.sqrt(2)) == 0

    def test_non_increasing(self):
        distances = [0.6 + i * 0.01 for i in range(120)]
        values = [radial_alpha(d) for d in distances]
        assert all(a >= b for a, b in zip(values, values[1:]))


class TestSynthesize:
    """几何蒙版"""

    def test_radial_shape_and_range(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(10, 10, MaskStyle.RADIAL_ALPHA)

        assert len(mask) == 100
        assert mask.channels == 1
        assert mask.values.min() >= 0
        assert mask.values.max() <= 255

    def test_radial_center_and_corner(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(10, 10)

        assert mask.at(5, 5) == 255
        assert mask.at(0, 0) == 0

    def test_radial_corners_on_even_size(self, synthesizer: MaskSynthesizer):
        """中心为 (5, 5) 时只有 (0, 0) 距离为 √2，其余三个角离中心更近"""
        mask = synthesizer.synthesize(10, 10)

        assert mask.at(0, 0) == 0
        assert mask.at(9, 0) == 30
        assert mask.at(0, 9) == 30
        assert mask.at(9, 9) == 69

    @pytest.mark.parametrize("size", [(1, 1), (1, 7), (9, 1), (3, 5), (64, 48)])
    def test_radial_center_pixel_is_opaque(self, synthesizer: MaskSynthesizer, size):
        width, height = size
        mask = synthesizer.synthesize(width, height)
        assert mask.at(width // 2, height // 2) == 255

    def test_deterministic(self, synthesizer: MaskSynthesizer):
        first = synthesizer.synthesize(33, 17, MaskStyle.ELLIPTICAL_SOFT)
        second = MaskSynthesizer().synthesize(33, 17, MaskStyle.ELLIPTICAL_SOFT)
        assert np.array_equal(first.values, second.values)

    def test_elliptical(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(20, 20, MaskStyle.ELLIPTICAL_SOFT)

        assert mask.at(10, 10) == 255
        assert mask.at(0, 0) == 0
        # 水平半径 7，x=17 恰好在椭圆边界上
        assert mask.at(17, 10) == 0
        assert 0 < mask.at(14, 10) < 255

    def test_edge_distance(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(10, 10, MaskStyle.COLOR_VARIANCE_EDGE)

        assert mask.at(0, 5) == 0
        assert mask.at(5, 0) == 0
        assert mask.at(5, 5) == 255
        assert mask.at(1, 5) < mask.at(3, 5)

    def test_invalid_dimensions(self, synthesizer: MaskSynthesizer):
        with pytest.raises(ValueError):
            synthesizer.synthesize(0, 10)

    def test_mask_is_read_only(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(4, 4)
        with pytest.raises(ValueError):
            mask.values[0, 0] = 1

    def test_to_rgba(self, synthesizer: MaskSynthesizer):
        mask = synthesizer.synthesize(10, 10)
        rgba = mask.to_rgba()

        assert rgba.shape == (10, 10, 4)
        assert (rgba[..., :3] == 255).all()
        assert rgba[5, 5, 3] == 255
        assert rgba[0, 0, 3] == 0


class TestBlend:
    """蒙版混合"""

    def test_weights(self):
        blended = MaskSynthesizer.blend(
            constant_mask(100), constant_mask(200), constant_mask(50)
        )
        # 0.3 * 100 + 0.4 * 200 + 0.3 * 50
        assert (blended.values == 125).all()

    def test_saturates_at_255(self):
        blended = MaskSynthesizer.blend(
            constant_mask(255), constant_mask(255), constant_mask(255)
        )
        assert (blended.values == 255).all()

    def test_size_mismatch(self):
        with pytest.raises(ValueError):
            MaskSynthesizer.blend(
                constant_mask(1, (4, 3)), constant_mask(1, (3, 4)), constant_mask(1, (4, 3))
            )

    def test_mask_shape_validation(self):
        with pytest.raises(ValueError):
            Mask(width=4, height=3, values=np.zeros((4, 3), dtype=np.uint8))


class TestEdgeResponse:
    """拉普拉斯边缘响应"""

    def test_flat_image_has_no_edges(self):
        mask = MaskSynthesizer.edge_response(Image.new("RGB", (12, 8), color=(90, 90, 90)))
        assert mask.dimensions == (12, 8)
        assert (mask.values == 0).all()

    def test_edge_detected(self):
        img = Image.new("L", (12, 12), color=0)
        img.paste(255, (6, 0, 12, 12))
        mask = MaskSynthesizer.edge_response(img)
        assert mask.values[:, 6].max() > 0


class TestSegmentation:
    """分割策略"""

    def test_radial_fallback(self):
        img = Image.new("RGB", (10, 10))
        mask = RadialFallback().mask_for(img)
        assert mask.at(5, 5) == 255
        assert mask.at(0, 0) == 0

    def test_blended_heuristic(self):
        img = Image.new("RGB", (20, 16), color=(40, 40, 40))
        mask = BlendedHeuristic().mask_for(img)
        assert mask.dimensions == (20, 16)
        # 平坦图片边缘响应为 0，中心为 0.4 * 255 + 0.3 * 255
        assert abs(mask.at(10, 8) - 178.5) <= 1
        assert mask.at(0, 0) == 0

    @pytest.mark.parametrize(
        ("mode", "cls"),
        [(SegmentationMode.RADIAL, RadialFallback), (SegmentationMode.BLENDED, BlendedHeuristic)],
    )
    def test_get_strategy(self, mode, cls):
        assert isinstance(get_strategy(mode), cls)
