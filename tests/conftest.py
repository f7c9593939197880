# tests/conftest.py
import asyncio
import sys
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

# 确保 src 目录在 sys.path 中
src_path = Path(__file__).resolve().parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from openttd_admin.config import AdminConfig


@pytest.fixture
def valid_config():
    """
    [Fixture] 返回一个指向本地测试服务器的 AdminConfig 对象。
    """
    return AdminConfig(
        host="127.0.0.1",
        password="pw",
        port=3977,
        client_name="bot",
        client_version="1",
        connect_timeout=1.0,
        read_size=4096,
    )


@pytest.fixture
def mock_net():
    """
    [Fixture] 模拟的网络客户端：connect/send/close 为 AsyncMock。

    receive 从 net.incoming 队列取数据块，队列为空时挂起；
    放入异常对象时直接抛出 (模拟传输层故障)。
    """
    incoming: asyncio.Queue = asyncio.Queue()

    async def _receive():
        item = await incoming.get()
        if isinstance(item, Exception):
            raise item
        return item

    net = MagicMock()
    net.connect = AsyncMock()
    net.send = AsyncMock()
    net.close = AsyncMock()
    net.receive = AsyncMock(side_effect=_receive)
    net.incoming = incoming
    return net
