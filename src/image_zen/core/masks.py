"""透明度蒙版合成模块。

只根据像素的几何位置生成蒙版，不读取像素内容；edge_response 是唯一读取图像的函数。
"""

import math
from enum import Enum

import numpy as np
from PIL import Image, ImageOps

from ..models.image_buffer import Mask


class MaskStyle(str, Enum):
    """蒙版样式"""

    RADIAL_ALPHA = "radial_alpha"  # 径向渐变，中心完全不透明
    ELLIPTICAL_SOFT = "elliptical_soft"  # 椭圆软边
    COLOR_VARIANCE_EDGE = "color_variance_edge"  # 按到边缘的距离，与颜色无关


# 径向蒙版：d ≤ 0.6 完全不透明，之后线性衰减到 d = 1.4
RADIAL_CORE = 0.6
RADIAL_FALLOFF_END = 1.4

# 椭圆蒙版半径比例
ELLIPSE_RX = 0.35
ELLIPSE_RY = 0.45
ELLIPSE_EXPONENT = 0.3

EDGE_EXPONENT = 0.8

# 混合权重：边缘 / 中心 / 位置
BLEND_WEIGHTS = (0.3, 0.4, 0.3)

LAPLACIAN_KERNEL = (-1, -1, -1, -1, 8, -1, -1, -1, -1)
LAPLACIAN_OFFSETS = tuple((dy, dx) for dy in range(3) for dx in range(3))


def radial_alpha(d: float) -> int:
    """归一化距离 d 处的径向透明度"""
    if d <= RADIAL_CORE:
        return 255
    return int(math.floor(max(0.0, 255 * (RADIAL_FALLOFF_END - d)) + 0.5))


def _round_half_up(values: np.ndarray) -> np.ndarray:
    return np.floor(values + 0.5)


def _normalized_offsets(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    """以 (w/2, h/2) 为中心、半宽半高为单位的坐标偏移

    尺寸为 1 的维度整列（行）都在中心线上，偏移为 0。
    """
    xs = np.arange(width, dtype=np.float64)
    ys = np.arange(height, dtype=np.float64)

    dx = (xs - width / 2) / (width / 2) if width > 1 else np.zeros(1)
    dy = (ys - height / 2) / (height / 2) if height > 1 else np.zeros(1)

    return np.meshgrid(dx, dy)


def _to_mask(width: int, height: int, alpha: np.ndarray) -> Mask:
    values = np.clip(_round_half_up(alpha), 0, 255).astype(np.uint8)
    return Mask(width=width, height=height, values=values)


class MaskSynthesizer:
    """几何蒙版合成器

    同样的尺寸和样式总是生成同样的蒙版。
    """

    def synthesize(
        self, width: int, height: int, style: MaskStyle = MaskStyle.RADIAL_ALPHA
    ) -> Mask:
        """生成 width × height 的透明度蒙版

        Args:
            width: 宽度，必须大于 0
            height: 高度，必须大于 0
            style: 蒙版样式
        """
        if width <= 0 or height <= 0:
            raise ValueError(f"mask dimensions must be positive, got {width}x{height}")

        match style:
            case MaskStyle.RADIAL_ALPHA:
                return self._radial(width, height)
            case MaskStyle.ELLIPTICAL_SOFT:
                return self._elliptical(width, height)
            case MaskStyle.COLOR_VARIANCE_EDGE:
                return self._edge_distance(width, height)

    def _radial(self, width: int, height: int) -> Mask:
        dx, dy = _normalized_offsets(width, height)
        d = np.sqrt(dx * dx + dy * dy)
        alpha = np.where(
            d <= RADIAL_CORE,
            255.0,
            np.maximum(0.0, 255 * (RADIAL_FALLOFF_END - d)),
        )
        return _to_mask(width, height, alpha)

    def _elliptical(self, width: int, height: int) -> Mask:
        xs = np.arange(width, dtype=np.float64)
        ys = np.arange(height, dtype=np.float64)
        gx, gy = np.meshgrid(
            (xs - width / 2) / (width * ELLIPSE_RX),
            (ys - height / 2) / (height * ELLIPSE_RY),
        )
        d = gx * gx + gy * gy
        inside = d < 1
        alpha = np.zeros_like(d)
        alpha[inside] = 255 * np.power(1 - d[inside], ELLIPSE_EXPONENT)
        return _to_mask(width, height, alpha)

    def _edge_distance(self, width: int, height: int) -> Mask:
        xs = np.arange(width, dtype=np.float64)
        ys = np.arange(height, dtype=np.float64)
        dist_x = np.minimum(xs, width - xs) / (width / 2)
        dist_y = np.minimum(ys, height - ys) / (height / 2)
        gx, gy = np.meshgrid(dist_x, dist_y)
        edge = np.minimum(gx, gy)
        alpha = np.power(edge, EDGE_EXPONENT) * 255
        return _to_mask(width, height, alpha)

    @staticmethod
    def blend(edge: Mask, center: Mask, color: Mask) -> Mask:
        """按固定权重混合三个蒙版，结果限制在 [0, 255]"""
        if not (edge.dimensions == center.dimensions == color.dimensions):
            raise ValueError(
                "cannot blend masks of different sizes: "
                f"{edge.dimensions}, {center.dimensions}, {color.dimensions}"
            )

        w_edge, w_center, w_color = BLEND_WEIGHTS
        combined = (
            edge.values.astype(np.float64) * w_edge
            + center.values.astype(np.float64) * w_center
            + color.values.astype(np.float64) * w_color
        )
        return _to_mask(edge.width, edge.height, combined)

    @staticmethod
    def edge_response(img: Image.Image) -> Mask:
        """灰度、自动对比度后的拉普拉斯边缘响应

        边界按最近像素延拓，平坦区域（包括图像边界）的响应为 0。
        """
        grey = np.asarray(ImageOps.autocontrast(img.convert("L")), dtype=np.float64)
        padded = np.pad(grey, 1, mode="edge")
        height, width = grey.shape

        response = np.zeros_like(grey)
        for (dy, dx), weight in zip(LAPLACIAN_OFFSETS, LAPLACIAN_KERNEL):
            response += weight * padded[dy : dy + height, dx : dx + width]

        values = np.clip(response, 0, 255).astype(np.uint8)
        return Mask(width=img.width, height=img.height, values=values)
