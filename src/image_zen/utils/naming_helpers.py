"""文件命名工具模块。

根据输入文件、输出选项、格式与后缀生成输出路径。
"""

from pathlib import Path


class OutputSuffix:
    """各命令的输出文件名后缀"""

    REMOVE_BACKGROUND = ""
    COMPRESS = "_compressed"
    ENHANCE = "_enhanced"

    @staticmethod
    def upscale(scale: int) -> str:
        return f"_{scale}x"


def generate_output_name(input_path: Path, format_name: str, suffix: str = "") -> str:
    """生成输出文件名（不含路径）

    Examples:
        >>> generate_output_name(Path("a/photo.jpg"), "webp", "_compressed")
        'photo_compressed.webp'
    """
    return f"{input_path.stem}{suffix}.{format_name.lower()}"


def resolve_output_path(
    input_path: str | Path,
    output_option: str | Path | None,
    format_name: str,
    suffix: str = "",
) -> Path:
    """解析输出路径

    Args:
        input_path: 输入文件路径
        output_option: -o 选项的值；带扩展名视为文件，否则视为目录
        format_name: 输出格式，决定扩展名
        suffix: 文件名后缀

    Returns:
        Path: 输出文件路径
    """
    input_path = Path(input_path)
    name = generate_output_name(input_path, format_name, suffix)

    if output_option:
        output = Path(output_option)
        if output.suffix:
            return output
        return output / name

    return input_path.parent / name
