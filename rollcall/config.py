"""
rollcall 全局配置模块
所有可配置参数集中管理，支持环境变量覆盖
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

# ============================================================
# 路径配置
# ============================================================

# 包目录 (rollcall/)
PACKAGE_DIR = Path(__file__).resolve().parent

# 默认页面目录 (index.html / admin.html / classroom.html)
DEFAULT_STATIC_DIR = PACKAGE_DIR / "static"


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


# ============================================================
# 服务器配置
# ============================================================

@dataclass
class ServerConfig:
    """HTTP / WebSocket 服务参数，支持环境变量覆盖"""
    host: str = "0.0.0.0"                  # 监听地址 (0.0.0.0 = 局域网可访问)
    port: int = 8000                       # 监听端口
    log_level: str = "info"                # uvicorn / logging 级别
    static_dir: Path = DEFAULT_STATIC_DIR  # 页面文件目录
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    def __post_init__(self):
        # 支持环境变量覆盖
        self.host = os.environ.get("ROLLCALL_HOST", self.host)
        self.port = int(os.environ.get("ROLLCALL_PORT", self.port))
        self.log_level = os.environ.get("ROLLCALL_LOG_LEVEL", self.log_level).lower()
        self.static_dir = Path(os.environ.get("ROLLCALL_STATIC_DIR", self.static_dir))

        origins = os.environ.get("ROLLCALL_CORS_ORIGINS")
        if origins is not None:
            self.cors_origins = _split_origins(origins)


# ============================================================
# 全局实例
# ============================================================

server = ServerConfig()


def print_config_summary():
    """打印当前配置摘要（调试用）"""
    print("=" * 50)
    print("rollcall Configuration Summary")
    print("=" * 50)
    print(f"  Listen:      {server.host}:{server.port}")
    print(f"  Log level:   {server.log_level}")
    print(f"  Static dir:  {server.static_dir}")
    print(f"  CORS:        {', '.join(server.cors_origins) or '(none)'}")
    print("=" * 50)
