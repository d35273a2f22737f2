#!/usr/bin/env python3
"""
rollcall Server — 启动入口
==========================

用法:
    rollcall                                # 默认 0.0.0.0:8000
    rollcall --port 9090                    # 指定端口
    rollcall --host 127.0.0.1               # 仅本地访问
    rollcall --static-dir ./pages           # 指定页面目录

也可以通过环境变量配置 (ROLLCALL_HOST / ROLLCALL_PORT / ...), 命令行参数优先。
"""

import argparse
import logging
from pathlib import Path

from . import config

logger = logging.getLogger("rollcall")

LOG_FORMAT = "[%(asctime)s] %(levelname)-7s %(name)s: %(message)s"


def setup_logging(level: str = "info"):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%H:%M:%S",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="rollcall attendance server")
    parser.add_argument("--host", default=config.server.host,
                        help=f"监听地址 (default: {config.server.host})")
    parser.add_argument("--port", type=int, default=config.server.port,
                        help=f"监听端口 (default: {config.server.port})")
    parser.add_argument("--log-level", default=config.server.log_level,
                        choices=["debug", "info", "warning", "error"],
                        help="日志级别")
    parser.add_argument("--static-dir", type=Path, default=config.server.static_dir,
                        help="页面文件目录")
    return parser


def apply_args(args: argparse.Namespace):
    """命令行参数写回全局配置"""
    config.server.host = args.host
    config.server.port = args.port
    config.server.log_level = args.log_level
    config.server.static_dir = args.static_dir


def main(argv=None):
    args = build_parser().parse_args(argv)
    apply_args(args)
    setup_logging(args.log_level)

    logger.info("=" * 50)
    logger.info("rollcall Server starting...")
    logger.info("=" * 50)
    logger.info(f"  监听: http://{args.host}:{args.port}")
    logger.info(f"  页面目录: {args.static_dir}")
    logger.info(f"  API 文档: http://localhost:{args.port}/docs")
    logger.info("  資料儲存於瀏覽器 localStorage")
    logger.info("=" * 50)

    import uvicorn
    from .server import app

    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level)


if __name__ == "__main__":
    main()
