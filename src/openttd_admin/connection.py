# File: src/openttd_admin/connection.py
"""
OpenTTD Admin 连接 (Connection)

职责：
1. 资源组装：State + Network + Reassembler + Dispatcher。
2. 生命周期：Disconnected -> Connecting -> Connected -> Closed。
3. 入站：数据块 -> 帧 -> 事件 -> 监听器，严格按到达顺序。
4. 出站：命令构建 -> 帧编码 -> 写入 Transport。
"""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import replace
from typing import Any

from .config import AdminConfig
from .exceptions import (
    ConnectionClosed,
    ConnectTimeout,
    NetworkError,
    ProtocolError,
    ProtocolFault,
    StateError,
)
from .network import NetworkClient
from .protocols import commands
from .protocols.dispatcher import REFUSAL_CODES, Event, PacketDispatcher
from .protocols.reassembler import StreamReassembler
from .state import ConnectionState, ConnectionStatus

logger = logging.getLogger(__name__)

# 定义回调函数类型别名：支持同步或异步函数
EventCallback = Callable[[Event], Any | Awaitable[Any]]

# 传输层故障对应的 error 事件代码
ERROR_CONNECTION = "connectionerror"
ERROR_CLOSE = "connectionclose"
ERROR_TIMEOUT = "connectiontimeout"
ERROR_MALFORMED_STREAM = "malformedstream"


class AdminConnection:
    """OpenTTD Admin 端口连接 (Async)。

    一个实例对应一条 TCP 连接，关闭后不可复用。

    Usage::

        async with AdminConnection(config) as conn:
            conn.on("welcome", lambda ev: print(ev.payload.server_name))
            await conn.authenticate()
            await conn.send_rcon("companies")
    """

    def __init__(
        self,
        config: AdminConfig,
        net_client: NetworkClient | None = None,
    ) -> None:
        """初始化连接。

        Args:
            config: 全局配置对象。
            net_client: 可选的网络客户端，默认按 config 新建。
        """
        self.config = config
        self.net_client = net_client or NetworkClient(config)

        self._state = ConnectionState()
        self._reassembler = StreamReassembler()
        self._dispatcher = PacketDispatcher()

        self._listeners: list[tuple[str | None, EventCallback]] = []
        self._callback_tasks: set[asyncio.Task] = set()
        self._read_task: asyncio.Task | None = None
        self._fault: ProtocolFault | None = None

    @property
    def state(self) -> ConnectionState:
        """获取当前会话状态的只读副本。"""
        return replace(self._state)

    @property
    def status(self) -> ConnectionStatus:
        return self._state.status

    @property
    def fault(self) -> ProtocolFault | None:
        """服务器拒绝 (FULL/BANNED/ERROR) 后记录的故障，无故障为 None。"""
        return self._fault

    # =========================================================================
    # 监听器
    # =========================================================================

    def add_listener(self, callback: EventCallback, event_name: str | None = None) -> None:
        """注册事件监听器。

        Args:
            callback: 接收 Event 的同步或异步函数。
            event_name: 只接收指定名称的事件，None 表示接收全部。
        """
        entry = (event_name, callback)
        if entry not in self._listeners:
            self._listeners.append(entry)

    def on(self, event_name: str, callback: EventCallback) -> None:
        """add_listener 的便捷写法，只接收指定事件。"""
        self.add_listener(callback, event_name)

    def remove_listener(self, callback: EventCallback) -> None:
        """移除该回调的所有注册。"""
        self._listeners = [entry for entry in self._listeners if entry[1] != callback]

    # =========================================================================
    # 生命周期
    # =========================================================================

    async def connect(self) -> None:
        """建立 TCP 连接并启动读取任务。

        Raises:
            StateError: 连接不处于 DISCONNECTED 状态，或建立期间被 close()。
            NetworkError: 连接失败 (同时会发出 error 事件)。
        """
        if self._state.status != ConnectionStatus.DISCONNECTED:
            raise StateError(f"无法在 {self._state.status.name} 状态下连接")

        self._update_status(
            ConnectionStatus.CONNECTING,
            f"正在连接 {self.config.host}:{self.config.port}...",
        )

        try:
            await self.net_client.connect()
        except ConnectTimeout as e:
            await self._handle_failure(ERROR_TIMEOUT, e)
            raise
        except NetworkError as e:
            await self._handle_failure(ERROR_CONNECTION, e)
            raise

        if self._state.status != ConnectionStatus.CONNECTING:
            # 等待期间已被 close()，刚建立的 Transport 直接释放
            await self.net_client.close()
            raise StateError("连接在建立过程中已被关闭")

        self._update_status(ConnectionStatus.CONNECTED, "连接已建立")
        self._emit(Event("connect"))
        self._read_task = asyncio.create_task(
            self._read_loop(), name="AdminReadTask"
        )

    async def close(self) -> None:
        """发送 ADMIN_QUIT 并关闭连接。重复调用无副作用。"""
        status = self._state.status
        if status == ConnectionStatus.CLOSED:
            return

        if status == ConnectionStatus.CONNECTED:
            try:
                await self.net_client.send(commands.build_quit_packet())
                self._state.frames_sent += 1
            except NetworkError as e:
                logger.warning(f"发送 QUIT 失败: {e}")

        self._update_status(ConnectionStatus.CLOSED, "连接已关闭")
        await self._stop_reading()
        await self.net_client.close()

    async def wait_closed(self) -> None:
        """等待读取任务结束 (连接被关闭或传输层故障)。"""
        task = self._read_task
        if task is None:
            return
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def __aenter__(self):
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    # =========================================================================
    # 入站
    # =========================================================================

    def handle_data(self, chunk: bytes) -> list[Event]:
        """处理一个入站数据块。

        所有帧按到达顺序分发，前一帧的监听器全部执行完才处理下一帧。

        Returns:
            list[Event]: 本次产生的全部事件 (已投递给监听器)。

        Raises:
            MalformedHeader: 数据流已损坏，无法继续重组。
                损坏位置之前的帧会先完成投递。
        """
        delivered: list[Event] = []
        for frame in self._reassembler.feed(chunk):
            self._state.frames_received += 1
            logger.debug(f"收到帧: {frame!r}")
            for event in self._dispatcher.dispatch(frame):
                self._track(event)
                self._emit(event)
                delivered.append(event)

        error = self._reassembler.error
        if error is not None:
            # 损坏帧头之前的帧已全部投递
            raise error
        return delivered

    async def _read_loop(self) -> None:
        """[Internal] 唯一的读取者：接收数据块并交给 handle_data。"""
        try:
            while self._state.status == ConnectionStatus.CONNECTED:
                chunk = await self.net_client.receive()
                self.handle_data(chunk)

        except asyncio.CancelledError:
            logger.debug("读取任务被取消")
            raise
        except ConnectionClosed as e:
            await self._handle_failure(ERROR_CLOSE, e)
        except NetworkError as e:
            await self._handle_failure(ERROR_CONNECTION, e)
        except ProtocolError as e:
            await self._handle_failure(ERROR_MALFORMED_STREAM, e)

    async def _stop_reading(self) -> None:
        task = self._read_task
        if task is None or task.done() or task is asyncio.current_task():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def _handle_failure(self, code: str, exc: Exception) -> None:
        """传输层故障：转为 error 事件并进入 CLOSED。"""
        if self._state.status == ConnectionStatus.CLOSED:
            return

        logger.error(f"连接故障 ({code}): {exc}")
        self._state.last_error = code
        self._update_status(ConnectionStatus.CLOSED, f"连接因故障关闭: {code}")
        self._emit(Event("error", code))
        await self._stop_reading()
        await self.net_client.close()

    def _track(self, event: Event) -> None:
        """根据事件更新会话状态。"""
        if event.name == "authenticate":
            self._state.protocol_version = event.payload.version
        elif event.name == "welcome":
            self._state.server_name = event.payload.server_name
        elif event.name == "error":
            self._state.last_error = str(event.payload)
            if event.payload in REFUSAL_CODES.values() or isinstance(event.payload, int):
                self._fault = ProtocolFault(f"服务器拒绝: {event.payload}", event.payload)
                logger.warning(f"服务器返回错误: {self._fault}")

    # =========================================================================
    # 出站命令
    # =========================================================================

    async def authenticate(
        self,
        user: str | None = None,
        password: str | None = None,
        version: str | None = None,
    ) -> None:
        """发送 ADMIN_JOIN。未提供的参数取自配置。"""
        await self._send(
            commands.build_join_packet(
                password=self.config.password if password is None else password,
                client_name=self.config.client_name if user is None else user,
                version=self.config.client_version if version is None else version,
            )
        )

    async def send_rcon(self, command: str) -> None:
        """在服务器控制台执行命令，输出以 rcon 事件返回，结束时收到 rconend。"""
        await self._send(commands.build_rcon_packet(command))

    async def send_chat(
        self, action: int, dest_type: int, dest_id: int, message: str
    ) -> None:
        await self._send(commands.build_chat_packet(action, dest_type, dest_id, message))

    async def send_ping(self, nonce: int) -> None:
        await self._send(commands.build_ping_packet(nonce))

    async def send_update_frequency(self, update_type: int, frequency: int) -> None:
        await self._send(commands.build_update_frequency_packet(update_type, frequency))

    async def send_poll(self, poll_type: int, poll_id: int) -> None:
        await self._send(commands.build_poll_packet(poll_type, poll_id))

    async def _send(self, packet: bytes) -> None:
        """[Internal] 写入一个完整帧。

        Raises:
            StateError: 连接不处于 CONNECTED 状态。
            ProtocolFault: 服务器已拒绝本连接。
            NetworkError: 写入失败 (同时会发出 error 事件)。
        """
        if self._state.status != ConnectionStatus.CONNECTED:
            raise StateError(f"无法在 {self._state.status.name} 状态下发送数据")
        if self._fault is not None:
            raise self._fault

        try:
            await self.net_client.send(packet)
        except NetworkError as e:
            await self._handle_failure(ERROR_CONNECTION, e)
            raise

        self._state.frames_sent += 1
        logger.debug(f"已发送 {len(packet)} 字节")

    # =========================================================================
    # 事件投递
    # =========================================================================

    def _emit(self, event: Event) -> None:
        """把事件投递给所有匹配的监听器。"""
        for event_name, callback in list(self._listeners):
            if event_name is not None and event_name != event.name:
                continue
            try:
                result = callback(event)
                # 异步回调 (含 partial 包装、async __call__) 返回 awaitable，交给事件循环
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._callback_tasks.add(task)
                    task.add_done_callback(self._callback_tasks.discard)
            except Exception as e:
                logger.error(f"回调执行异常 ({event.name}): {e}")

    def _update_status(self, status: ConnectionStatus, msg: str) -> None:
        self._state.status = status
        logger.info(f"[{status.name}] {msg}")
