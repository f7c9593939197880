# src/openttd_admin/network.py
"""
OpenTTD Admin 核心库 - 网络模块 (Network) [Asyncio Edition]

封装 TCP 连接的建立、发送、接收和关闭逻辑。
该模块屏蔽了底层 Stream 的复杂性，向 Connection 提供纯粹的 bytes 收发接口。
"""

import asyncio
import logging
import socket

from .config import AdminConfig
from .exceptions import ConnectionClosed, ConnectTimeout, NetworkError

logger = logging.getLogger(__name__)


class NetworkClient:
    """
    封装 asyncio TCP 操作的客户端。
    """

    def __init__(self, config: AdminConfig):
        self.config = config
        self.reader: asyncio.StreamReader | None = None
        self.writer: asyncio.StreamWriter | None = None

    @property
    def is_connected(self) -> bool:
        return self.writer is not None and not self.writer.is_closing()

    async def connect(self) -> None:
        """
        建立 TCP 连接，超时由 config.connect_timeout 控制。
        """
        target = (self.config.host, self.config.port)

        try:
            self.reader, self.writer = await asyncio.wait_for(
                asyncio.open_connection(*target),
                timeout=self.config.connect_timeout,
            )
        except asyncio.TimeoutError:
            await self.close()
            raise ConnectTimeout(
                f"连接超时 {target} ({self.config.connect_timeout}s)"
            ) from None
        except OSError as e:
            await self.close()
            raise NetworkError(f"连接失败 {target}: {e}") from e

        # 管理命令都是小包，关闭 Nagle
        sock = self.writer.get_extra_info("socket")
        if sock is not None:
            try:
                sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError as e:
                logger.debug(f"设置 TCP_NODELAY 失败: {e}")

        logger.debug(f"TCP 连接已建立: {target}")

    async def send(self, packet: bytes) -> None:
        """
        发送一个完整帧并等待写缓冲排空。
        """
        if not self.is_connected:
            raise NetworkError("Transport 已关闭")

        assert self.writer is not None

        try:
            self.writer.write(packet)
            await self.writer.drain()
        except (OSError, RuntimeError) as e:
            raise NetworkError(f"发送失败: {e}") from e

    async def receive(self) -> bytes:
        """
        接收一个数据块 (长度不定，最多 config.read_size 字节)。

        Raises:
            ConnectionClosed: 对端关闭连接 (EOF)。
            NetworkError: 读取出错。
        """
        if self.reader is None:
            raise NetworkError("Transport 未初始化")

        try:
            data = await self.reader.read(self.config.read_size)
        except OSError as e:
            raise NetworkError(f"接收错误: {e}") from e

        if not data:
            raise ConnectionClosed("连接已关闭")
        return data

    async def close(self) -> None:
        """关闭 Transport"""
        writer = self.writer
        self.writer = None
        self.reader = None
        if writer is None:
            return

        writer.close()
        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug(f"关闭连接时出错: {e}")
        logger.debug("TCP Transport 已关闭")

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
