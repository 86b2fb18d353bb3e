"""Entry point for python -m image_zen.

默认运行命令行工具；``python -m image_zen mcp`` 启动 MCP 服务器。
"""

import sys


def main() -> None:
    """主入口函数"""
    if len(sys.argv) > 1 and sys.argv[1] == "mcp":
        from .mcp_server import main as server_main

        server_main()
        return

    from .cli import app

    app(prog_name="image-zen")


if __name__ == "__main__":
    main()
