# File: src/openttd_admin/protocols/reassembler.py
"""
OpenTTD Admin 协议层 - 流重组器 (Stream Reassembler)

TCP 是字节流，一次读取可能只包含半个帧，也可能包含多个帧。
本模块把任意切分的字节块还原为有序的完整帧序列。

状态只有两项:
- pending: 已收到但尚未凑成完整帧的字节。
- expected_length: 当前帧的声明长度，帧头未读到时为 None。
"""

import logging

from ..exceptions import MalformedHeader
from .codec import Frame, decode_frame, decode_header
from .constants import HEADER_SIZE

logger = logging.getLogger(__name__)


class StreamReassembler:
    """增量式帧提取器。

    每个连接独占一个实例，不可在多个连接间共享。

    Usage::

        reassembler = StreamReassembler()
        for chunk in chunks:
            for frame in reassembler.feed(chunk):
                handle(frame)
    """

    def __init__(self) -> None:
        self._pending = bytearray()
        self._expected_length: int | None = None
        self._error: MalformedHeader | None = None

    @property
    def pending(self) -> bytes:
        """尚未组成完整帧的缓冲字节 (副本)。"""
        return bytes(self._pending)

    @property
    def expected_length(self) -> int | None:
        """当前帧的声明长度，帧头尚未到齐时为 None。"""
        return self._expected_length

    @property
    def error(self) -> MalformedHeader | None:
        """已检测到的帧头损坏，流正常时为 None。"""
        return self._error

    def __len__(self) -> int:
        return len(self._pending)

    def reset(self) -> None:
        """丢弃所有缓冲数据，回到初始状态。"""
        self._pending.clear()
        self._expected_length = None
        self._error = None

    def feed(self, chunk: bytes) -> list[Frame]:
        """喂入一个字节块，返回本次凑齐的所有完整帧。

        数据不足时只是继续等待，不会抛出异常。
        损坏的帧头之前已凑齐的帧照常返回，错误记录在 error 中，
        下一次 feed 时抛出。

        Args:
            chunk: 新到达的字节，可以为空。

        Returns:
            list[Frame]: 按到达顺序排列的零个或多个帧。

        Raises:
            MalformedHeader: 数据流中出现声明长度小于 3 的帧，流已无法继续解析。
        """
        if self._error is not None:
            raise self._error

        if chunk:
            self._pending.extend(chunk)

        if self._expected_length is None:
            try:
                self._read_header()
            except MalformedHeader as e:
                self._error = e
                raise

        frames: list[Frame] = []
        while (
            self._expected_length is not None
            and len(self._pending) >= self._expected_length
        ):
            frame = decode_frame(self._pending)
            del self._pending[: self._expected_length]
            self._expected_length = None
            frames.append(frame)

            # 剩余 1-2 字节时不读帧头，等下一块数据
            try:
                self._read_header()
            except MalformedHeader as e:
                logger.warning(f"帧头损坏，先交付已重组的 {len(frames)} 个帧: {e}")
                self._error = e
                break

        if frames:
            logger.debug(
                f"重组出 {len(frames)} 个帧，剩余缓冲 {len(self._pending)} 字节"
            )
        return frames

    def _read_header(self) -> None:
        """缓冲区足够 3 字节时解析下一个帧头。"""
        if len(self._pending) < HEADER_SIZE:
            return

        length, _ = decode_header(self._pending)
        if length < HEADER_SIZE:
            # 长度字段不可能小于帧头，后续字节已无法对齐
            raise MalformedHeader(f"声明的帧长度 {length} 小于帧头长度 {HEADER_SIZE}")
        self._expected_length = length
