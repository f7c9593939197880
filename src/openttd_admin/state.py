# File: src/openttd_admin/state.py
"""
OpenTTD Admin 核心库 - 状态模块

负责定义和存储连接的易变会话状态。
本模块不包含业务逻辑，仅作为数据容器供 Connection 读写。
"""

from dataclasses import dataclass
from enum import Enum, auto


class ConnectionStatus(Enum):
    """连接的生命周期状态枚举。

    状态流转示意:
    DISCONNECTED -> CONNECTING -> CONNECTED -> CLOSED
                        |                        ^
                        +------------------------+

    CLOSED 为终态，重新连接必须创建新的 AdminConnection。
    """

    DISCONNECTED = auto()
    """初始状态，对象已实例化但尚未发起连接。"""

    CONNECTING = auto()
    """正在建立 TCP 连接。"""

    CONNECTED = auto()
    """TCP 连接已建立，可以收发数据包。"""

    CLOSED = auto()
    """已关闭。主动关闭或传输层故障均进入此状态。"""


@dataclass
class ConnectionState:
    """存储一次 Admin 会话的易变状态数据。

    Attributes:
        status: 当前连接状态。
        last_error: 最近一次错误事件的描述，用于 UI 显示。
        server_name: 收到 welcome 包后记录的服务器名称。
        protocol_version: 收到 protocol 包后记录的 Admin 协议版本。
        frames_received: 已分发的入站帧数量。
        frames_sent: 已发送的出站帧数量。
    """

    status: ConnectionStatus = ConnectionStatus.DISCONNECTED
    last_error: str = ""

    server_name: str = ""
    protocol_version: int | None = None

    frames_received: int = 0
    frames_sent: int = 0

    @property
    def is_open(self) -> bool:
        """判断当前连接是否可以收发数据。"""
        return self.status == ConnectionStatus.CONNECTED
