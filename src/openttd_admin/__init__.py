# src/openttd_admin/__init__.py
"""
openttd-admin-core v0.1.0
OpenTTD Admin 端口的异步客户端核心库 (帧重组 + 编解码 + 事件分发)。
"""

# 暴露核心配置
from .config import (
    AdminConfig,
    create_config_from_dict,
    load_config_from_env,
    load_config_from_toml,
)

# 暴露连接与状态
from .connection import AdminConnection

# 暴露异常体系 (方便上层 try-except)
from .exceptions import (
    AdminError,
    ConfigError,
    ConnectionClosed,
    ConnectTimeout,
    MalformedHeader,
    NetworkError,
    NetworkErrorCode,
    ProtocolError,
    ProtocolFault,
    StateError,
)
from .protocols import Event, Frame, PacketDispatcher, StreamReassembler
from .state import ConnectionState, ConnectionStatus

__version__ = "0.1.0"

__all__ = [
    "AdminConnection",
    "AdminConfig",
    "ConnectionState",
    "ConnectionStatus",
    "Event",
    "Frame",
    "PacketDispatcher",
    "StreamReassembler",
    "create_config_from_dict",
    "load_config_from_env",
    "load_config_from_toml",
    "AdminError",
    "ConfigError",
    "NetworkError",
    "ConnectTimeout",
    "ConnectionClosed",
    "ProtocolError",
    "MalformedHeader",
    "ProtocolFault",
    "NetworkErrorCode",
    "StateError",
]
