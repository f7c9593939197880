# File: src/openttd_admin/protocols/commands.py
"""
OpenTTD Admin 出站命令构建器 (Command Builders)

负责将 Python 参数转换为符合协议规范的完整帧 (bytes)。
本模块是无状态的 (Stateless)，不持有任何配置或会话信息。
"""

import struct

from .codec import encode_frame, pack_string
from .constants import AdminPacket


def build_join_packet(password: str, client_name: str, version: str) -> bytes:
    """构建 ADMIN_JOIN 登录包。

    结构: password\\0 + client_name\\0 + version\\0

    Args:
        password: Admin 端口密码。
        client_name: 客户端名称。
        version: 客户端版本。
    """
    payload = pack_string(password) + pack_string(client_name) + pack_string(version)
    return encode_frame(AdminPacket.ADMIN_JOIN, payload)


def build_quit_packet() -> bytes:
    """构建 ADMIN_QUIT 包 (空载荷)。"""
    return encode_frame(AdminPacket.ADMIN_QUIT)


def build_rcon_packet(command: str) -> bytes:
    """构建 ADMIN_RCON 包，在服务器控制台执行一条命令。"""
    return encode_frame(AdminPacket.ADMIN_RCON, pack_string(command))


def build_chat_packet(action: int, dest_type: int, dest_id: int, message: str) -> bytes:
    """构建 ADMIN_CHAT 包。

    结构: action(u8) + dest_type(u8) + dest_id(u32le) + message\\0
    """
    header = struct.pack("<BBI", action, dest_type, dest_id)
    return encode_frame(AdminPacket.ADMIN_CHAT, header + pack_string(message))


def build_ping_packet(nonce: int) -> bytes:
    """构建 ADMIN_PING 包，服务器会用相同的 nonce 回复 SERVER_PONG。"""
    return encode_frame(AdminPacket.ADMIN_PING, struct.pack("<I", nonce))


def build_update_frequency_packet(update_type: int, frequency: int) -> bytes:
    """构建 ADMIN_UPDATE_FREQUENCY 订阅包。

    结构: update_type(u16le) + frequency(u16le)
    """
    return encode_frame(
        AdminPacket.ADMIN_UPDATE_FREQUENCY, struct.pack("<HH", update_type, frequency)
    )


def build_poll_packet(poll_type: int, poll_id: int) -> bytes:
    """构建 ADMIN_POLL 包。

    结构: poll_type(u8) + id(u32le)
    """
    return encode_frame(AdminPacket.ADMIN_POLL, struct.pack("<BI", poll_type, poll_id))
