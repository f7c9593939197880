# File: src/openttd_admin/protocols/dispatcher.py
"""
OpenTTD Admin 协议层 - 包分发器 (Packet Dispatcher)

把一个完整帧按类型码映射为具名事件。
分发器本身不持有监听器，只返回事件列表，由 Connection 负责投递。
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from ..exceptions import NetworkErrorCode, ProtocolError
from . import payloads
from .codec import Frame
from .constants import AdminPacket

logger = logging.getLogger(__name__)

# 载荷无法按声明布局解析时 error 事件携带的代码
MALFORMED_PACKET = "MALFORMED_PACKET"


@dataclass(frozen=True)
class Event:
    """一个应用层事件。

    Attributes:
        name: 事件名 (如 'welcome', 'chat', 'error')。
        payload: 事件数据，无载荷的事件为 None。
    """

    name: str
    payload: Any = None


PayloadParser = Callable[[payloads.PayloadReader], Any]

# 类型码 -> (事件名, 载荷解析函数)
PACKET_HANDLERS: dict[int, tuple[str, PayloadParser]] = {
    AdminPacket.SERVER_PROTOCOL: ("authenticate", payloads.parse_protocol),
    AdminPacket.SERVER_WELCOME: ("welcome", payloads.parse_welcome),
    AdminPacket.SERVER_DATE: ("date", payloads.parse_date),
    AdminPacket.SERVER_CLIENT_JOIN: ("clientjoin", payloads.parse_client_id),
    AdminPacket.SERVER_CLIENT_INFO: ("clientinfo", payloads.parse_client_info),
    AdminPacket.SERVER_CLIENT_UPDATE: ("clientupdate", payloads.parse_client_update),
    AdminPacket.SERVER_CLIENT_QUIT: ("clientquit", payloads.parse_client_id),
    AdminPacket.SERVER_CLIENT_ERROR: ("clienterror", payloads.parse_client_error),
    AdminPacket.SERVER_COMPANY_NEW: ("companynew", payloads.parse_company_id),
    AdminPacket.SERVER_COMPANY_INFO: ("companyinfo", payloads.parse_company_info),
    AdminPacket.SERVER_COMPANY_UPDATE: ("companyupdate", payloads.parse_company_update),
    AdminPacket.SERVER_COMPANY_REMOVE: ("companyremove", payloads.parse_company_remove),
    AdminPacket.SERVER_COMPANY_ECONOMY: (
        "companyeconomy",
        payloads.parse_company_economy,
    ),
    AdminPacket.SERVER_COMPANY_STATS: ("companystats", payloads.parse_company_stats),
    AdminPacket.SERVER_CHAT: ("chat", payloads.parse_chat),
    AdminPacket.SERVER_RCON: ("rcon", payloads.parse_rcon),
    AdminPacket.SERVER_RCON_END: ("rconend", payloads.parse_rcon_end),
    AdminPacket.SERVER_CONSOLE: ("console", payloads.parse_console),
    AdminPacket.SERVER_PONG: ("pong", payloads.parse_pong),
}

# 无载荷、直接转为事件的类型码
EMPTY_EVENTS: dict[int, str] = {
    AdminPacket.SERVER_NEWGAME: "newgame",
    AdminPacket.SERVER_SHUTDOWN: "shutdown",
}

# 服务器拒绝连接的类型码 -> error 事件代码
REFUSAL_CODES: dict[int, str] = {
    AdminPacket.SERVER_FULL: "FULL",
    AdminPacket.SERVER_BANNED: "BANNED",
}


class PacketDispatcher:
    """把帧映射为事件的无状态分发器。"""

    def dispatch(self, frame: Frame) -> list[Event]:
        """分发一个帧。

        Args:
            frame: 完整的入站帧。

        Returns:
            list[Event]: 零个或一个事件。未知类型码返回空列表。
        """
        packet_type = frame.packet_type

        if packet_type in REFUSAL_CODES:
            return [Event("error", REFUSAL_CODES[packet_type])]

        if packet_type == AdminPacket.SERVER_ERROR:
            return self._dispatch_server_error(frame)

        if packet_type in EMPTY_EVENTS:
            return [Event(EMPTY_EVENTS[packet_type])]

        handler = PACKET_HANDLERS.get(packet_type)
        if handler is None:
            logger.warning(f"未处理的包类型: {packet_type}")
            return []

        event_name, parser = handler
        try:
            data = parser(payloads.PayloadReader(frame.payload))
        except ProtocolError as e:
            logger.warning(f"解析 {event_name} 载荷失败: {e}")
            return [Event("error", MALFORMED_PACKET)]

        logger.debug(f"分发事件 '{event_name}': {data!r}")
        return [Event(event_name, data)]

    def _dispatch_server_error(self, frame: Frame) -> list[Event]:
        """SERVER_ERROR 的载荷只有一个 u8 错误码，直接作为 error 事件。"""
        try:
            code = payloads.PayloadReader(frame.payload).uint8()
        except ProtocolError as e:
            logger.warning(f"解析 SERVER_ERROR 载荷失败: {e}")
            return [Event("error", MALFORMED_PACKET)]

        try:
            return [Event("error", NetworkErrorCode(code))]
        except ValueError:
            return [Event("error", code)]
