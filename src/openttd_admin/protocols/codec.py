# File: src/openttd_admin/protocols/codec.py
"""
OpenTTD Admin 协议层 - 帧编解码 (Frame Codec)

帧结构::

    +-------------+-----------+---------------------------+
    | length u16le|  type u8  |  payload (length - 3 字节) |
    +-------------+-----------+---------------------------+

length 为整帧长度，包含 2 字节长度字段和 1 字节类型字段。
本模块是无状态的 (Stateless)，所有函数均为纯函数。
"""

import struct
from dataclasses import dataclass

from ..exceptions import MalformedHeader
from .constants import HEADER_FORMAT, HEADER_SIZE, ZERO_TERMINATOR


@dataclass(frozen=True)
class Frame:
    """一个完整的协议帧。

    Attributes:
        length: 整帧长度 (含帧头)。
        packet_type: 包类型码。
        payload: 载荷字节，长度恒为 length - 3。
    """

    length: int
    packet_type: int
    payload: bytes

    def __repr__(self) -> str:
        return (
            f"Frame(length={self.length}, type={self.packet_type}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


def zero_term() -> bytes:
    """返回单字节 NUL 结束符。"""
    return ZERO_TERMINATOR


def pack_string(text: str) -> bytes:
    """将字符串编码为 UTF-8 并追加 NUL 结束符。"""
    return text.encode("utf-8") + zero_term()


def encode_frame(packet_type: int, payload: bytes = b"") -> bytes:
    """构建一个完整的协议帧。

    不在此处限制载荷长度，超出 u16 的载荷由 struct 抛出 struct.error。

    Args:
        packet_type: 单字节包类型码。
        payload: 载荷字节，可以为空。

    Returns:
        bytes: 帧头 + 载荷。
    """
    return struct.pack(HEADER_FORMAT, len(payload) + HEADER_SIZE, packet_type) + payload


def decode_header(data: bytes) -> tuple[int, int]:
    """从前 3 字节解析帧头。

    Args:
        data: 至少包含 3 字节的缓冲区 (bytes / bytearray / memoryview)。

    Returns:
        tuple[int, int]: (length, packet_type)。

    Raises:
        MalformedHeader: 提供的字节不足 3 个。
    """
    if len(data) < HEADER_SIZE:
        raise MalformedHeader(f"帧头需要 {HEADER_SIZE} 字节，实际只有 {len(data)} 字节")
    return struct.unpack_from(HEADER_FORMAT, data, 0)


def decode_frame(data: bytes) -> Frame:
    """解析一个完整的帧。

    多余的尾部字节会被忽略，只取声明长度内的数据。

    Raises:
        MalformedHeader: 帧头不完整、声明长度小于 3 或数据不足声明长度。
    """
    length, packet_type = decode_header(data)
    if length < HEADER_SIZE:
        raise MalformedHeader(f"声明的帧长度 {length} 小于帧头长度 {HEADER_SIZE}")
    if len(data) < length:
        raise MalformedHeader(f"帧数据不足: 声明 {length} 字节，实际 {len(data)} 字节")
    return Frame(
        length=length,
        packet_type=packet_type,
        payload=bytes(data[HEADER_SIZE:length]),
    )
