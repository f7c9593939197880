# src/openttd_admin/protocols/constants.py
"""
OpenTTD Admin 协议层 - 常量定义

本模块定义了所有协议相关的包类型码、帧头布局与枚举值。
取值与 OpenTTD 源码 (network/core/tcp_admin.h) 保持一致。
"""

import struct
from enum import IntEnum

# =========================================================================
# 1. 帧布局 (Frame Layout)
# =========================================================================

# 帧头: length(u16le) + type(u8)，length 包含帧头自身
HEADER_FORMAT = "<HB"
HEADER_SIZE = struct.calcsize(HEADER_FORMAT)

# u16 长度字段所能表示的最大帧
MAX_FRAME_SIZE = 0xFFFF

ZERO_TERMINATOR = b"\x00"


# =========================================================================
# 2. 包类型码 (Packet Types)
# =========================================================================


class AdminPacket(IntEnum):
    """Admin 端口的包类型码。0-99 为客户端发出，100+ 为服务器发出。"""

    ADMIN_JOIN = 0
    ADMIN_QUIT = 1
    ADMIN_UPDATE_FREQUENCY = 2
    ADMIN_POLL = 3
    ADMIN_CHAT = 4
    ADMIN_RCON = 5
    ADMIN_GAMESCRIPT = 6
    ADMIN_PING = 7
    ADMIN_EXTERNAL_CHAT = 8

    SERVER_FULL = 100
    SERVER_BANNED = 101
    SERVER_ERROR = 102
    SERVER_PROTOCOL = 103
    SERVER_WELCOME = 104
    SERVER_NEWGAME = 105
    SERVER_SHUTDOWN = 106
    SERVER_DATE = 107
    SERVER_CLIENT_JOIN = 108
    SERVER_CLIENT_INFO = 109
    SERVER_CLIENT_UPDATE = 110
    SERVER_CLIENT_QUIT = 111
    SERVER_CLIENT_ERROR = 112
    SERVER_COMPANY_NEW = 113
    SERVER_COMPANY_INFO = 114
    SERVER_COMPANY_UPDATE = 115
    SERVER_COMPANY_REMOVE = 116
    SERVER_COMPANY_ECONOMY = 117
    SERVER_COMPANY_STATS = 118
    SERVER_CHAT = 119
    SERVER_RCON = 120
    SERVER_CONSOLE = 121
    SERVER_CMD_NAMES = 122
    SERVER_CMD_LOGGING = 123
    SERVER_GAMESCRIPT = 124
    SERVER_RCON_END = 125
    SERVER_PONG = 126


# =========================================================================
# 3. 订阅与轮询 (Update / Poll)
# =========================================================================


class UpdateType(IntEnum):
    """订阅更新的数据类型，ADMIN_POLL 复用同一组取值。"""

    DATE = 0
    CLIENT_INFO = 1
    COMPANY_INFO = 2
    COMPANY_ECONOMY = 3
    COMPANY_STATS = 4
    CHAT = 5
    CONSOLE = 6
    CMD_NAMES = 7
    CMD_LOGGING = 8
    GAMESCRIPT = 9


class UpdateFrequency(IntEnum):
    """订阅更新频率 (位标志)。"""

    POLL = 0x01
    DAILY = 0x02
    WEEKLY = 0x04
    MONTHLY = 0x08
    QUARTERLY = 0x10
    ANUALLY = 0x20
    AUTOMATIC = 0x40


# 轮询指定 "全部" 客户端/公司时使用的 ID
POLL_ALL = 0xFFFFFFFF


# =========================================================================
# 4. 聊天 (Chat)
# =========================================================================


class NetworkAction(IntEnum):
    """聊天及客户端动作类型。"""

    JOIN = 0
    LEAVE = 1
    SERVER_MESSAGE = 2
    CHAT = 3
    CHAT_COMPANY = 4
    CHAT_CLIENT = 5
    GIVE_MONEY = 6
    NAME_CHANGE = 7
    COMPANY_SPECTATOR = 8
    COMPANY_JOIN = 9
    COMPANY_NEW = 10
    KICKED = 11


class DestType(IntEnum):
    """聊天消息的目标类型。"""

    BROADCAST = 0
    TEAM = 1
    CLIENT = 2


# =========================================================================
# 5. 公司 (Company)
# =========================================================================


class CompanyRemoveReason(IntEnum):
    """公司被移除的原因。"""

    MANUAL = 0
    AUTOCLEAN = 1
    BANKRUPT = 2
