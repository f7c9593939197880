# src/openttd_admin/protocols/__init__.py
"""
OpenTTD Admin 协议层 (Protocol Layer)

本包负责协议帧的纯粹构建 (Build)、重组 (Reassemble) 与解析 (Parse)。

- 不包含任何 socket 操作或网络 I/O。
- 除 StreamReassembler 外不持有状态。
- 不依赖于 connection 或 network 层。
"""

from . import constants
from .codec import Frame, decode_frame, decode_header, encode_frame, zero_term
from .commands import (
    build_chat_packet,
    build_join_packet,
    build_ping_packet,
    build_poll_packet,
    build_quit_packet,
    build_rcon_packet,
    build_update_frequency_packet,
)
from .dispatcher import Event, PacketDispatcher
from .reassembler import StreamReassembler

# 公共 API
__all__ = [
    "constants",
    "Frame",
    "encode_frame",
    "decode_header",
    "decode_frame",
    "zero_term",
    "StreamReassembler",
    "Event",
    "PacketDispatcher",
    "build_join_packet",
    "build_quit_packet",
    "build_rcon_packet",
    "build_chat_packet",
    "build_ping_packet",
    "build_update_frequency_packet",
    "build_poll_packet",
]
