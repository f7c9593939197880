# File: src/openttd_admin/protocols/payloads.py
"""
OpenTTD Admin 协议层 - 载荷解析器 (Payload Parsers)

负责把服务器数据包的载荷字节转换为 Python 数据结构。
每个解析函数接收一个 PayloadReader 游标，返回事件载荷。
解析完声明字段后剩余的字节会被忽略 (新版服务器可能追加字段)。
"""

import struct
from dataclasses import dataclass, field

from ..exceptions import ProtocolError


class PayloadReader:
    """载荷字节的顺序读取游标 (小端序)。"""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(bytes(data))
        self._offset = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._offset

    def _unpack(self, fmt: str) -> int:
        size = struct.calcsize(fmt)
        if self.remaining < size:
            raise ProtocolError(
                f"载荷长度不足: 偏移 {self._offset} 处需要 {size} 字节，剩余 {self.remaining}"
            )
        (value,) = struct.unpack_from(fmt, self._data, self._offset)
        self._offset += size
        return value

    def uint8(self) -> int:
        return self._unpack("<B")

    def uint16(self) -> int:
        return self._unpack("<H")

    def uint32(self) -> int:
        return self._unpack("<I")

    def uint64(self) -> int:
        return self._unpack("<Q")

    def int64(self) -> int:
        return self._unpack("<q")

    def boolean(self) -> bool:
        return self.uint8() != 0

    def string(self) -> str:
        """读取一个 NUL 结尾的 UTF-8 字符串。"""
        raw = self._data[self._offset :].tobytes()
        end = raw.find(b"\x00")
        if end < 0:
            raise ProtocolError(f"偏移 {self._offset} 处的字符串缺少 NUL 结束符")
        self._offset += end + 1
        return raw[:end].decode("utf-8", errors="replace")


# =========================================================================
# 事件载荷数据结构
# =========================================================================


@dataclass
class UpdateSetting:
    """服务器支持的一项订阅类型及其允许的频率位掩码。"""

    update_type: int
    frequencies: int


@dataclass
class ProtocolInfo:
    """SERVER_PROTOCOL (103): 协议版本与可订阅的更新类型。"""

    version: int
    settings: list[UpdateSetting] = field(default_factory=list)


@dataclass
class WelcomeInfo:
    """SERVER_WELCOME (104): 登录成功后的服务器与地图信息。"""

    server_name: str
    revision: str
    dedicated: bool
    map_name: str
    seed: int
    landscape: int
    start_date: int
    map_x: int
    map_y: int


@dataclass
class ClientInfo:
    """SERVER_CLIENT_INFO (109)。"""

    client_id: int
    address: str
    name: str
    language: int
    join_date: int
    company: int


@dataclass
class ClientUpdate:
    """SERVER_CLIENT_UPDATE (110)。"""

    client_id: int
    name: str
    company: int


@dataclass
class ClientError:
    """SERVER_CLIENT_ERROR (112)。"""

    client_id: int
    error: int


@dataclass
class CompanyInfo:
    """SERVER_COMPANY_INFO (114)。"""

    company_id: int
    name: str
    manager: str
    colour: int
    protected: bool
    start_year: int
    is_ai: bool


@dataclass
class CompanyUpdate:
    """SERVER_COMPANY_UPDATE (115)。"""

    company_id: int
    name: str
    manager: str
    colour: int
    protected: bool
    bankruptcy: int
    share_owners: list[int]


@dataclass
class CompanyRemove:
    """SERVER_COMPANY_REMOVE (116)。"""

    company_id: int
    reason: int


@dataclass
class QuarterEconomy:
    value: int
    performance: int
    delivered_cargo: int


@dataclass
class CompanyEconomy:
    """SERVER_COMPANY_ECONOMY (117)。"""

    company_id: int
    money: int
    loan: int
    income: int
    delivered_cargo: int
    last_quarters: list[QuarterEconomy]


@dataclass
class CompanyStats:
    """SERVER_COMPANY_STATS (118)。

    vehicles / stations 依次为: 火车、卡车、公交、飞机、船只。
    """

    company_id: int
    vehicles: list[int]
    stations: list[int]


@dataclass
class ChatMessage:
    """SERVER_CHAT (119)。"""

    action: int
    dest_type: int
    client_id: int
    message: str
    data: int


@dataclass
class RconOutput:
    """SERVER_RCON (120)。"""

    colour: int
    output: str


@dataclass
class ConsoleOutput:
    """SERVER_CONSOLE (121)。"""

    origin: str
    text: str


# 公司统计中的交通工具种类数
VEHICLE_TYPE_COUNT = 5
# 经济数据中附带的历史季度数
ECONOMY_QUARTERS = 2
# 股东位数
SHARE_OWNER_COUNT = 4


# =========================================================================
# 解析函数
# =========================================================================


def parse_protocol(reader: PayloadReader) -> ProtocolInfo:
    info = ProtocolInfo(version=reader.uint8())
    while reader.boolean():
        info.settings.append(
            UpdateSetting(update_type=reader.uint16(), frequencies=reader.uint16())
        )
    return info


def parse_welcome(reader: PayloadReader) -> WelcomeInfo:
    return WelcomeInfo(
        server_name=reader.string(),
        revision=reader.string(),
        dedicated=reader.boolean(),
        map_name=reader.string(),
        seed=reader.uint32(),
        landscape=reader.uint8(),
        start_date=reader.uint32(),
        map_x=reader.uint16(),
        map_y=reader.uint16(),
    )


def parse_date(reader: PayloadReader) -> int:
    return reader.uint32()


def parse_client_id(reader: PayloadReader) -> int:
    """CLIENT_JOIN / CLIENT_QUIT 只携带客户端 ID。"""
    return reader.uint32()


def parse_client_info(reader: PayloadReader) -> ClientInfo:
    return ClientInfo(
        client_id=reader.uint32(),
        address=reader.string(),
        name=reader.string(),
        language=reader.uint8(),
        join_date=reader.uint32(),
        company=reader.uint8(),
    )


def parse_client_update(reader: PayloadReader) -> ClientUpdate:
    return ClientUpdate(
        client_id=reader.uint32(), name=reader.string(), company=reader.uint8()
    )


def parse_client_error(reader: PayloadReader) -> ClientError:
    return ClientError(client_id=reader.uint32(), error=reader.uint8())


def parse_company_id(reader: PayloadReader) -> int:
    return reader.uint8()


def parse_company_info(reader: PayloadReader) -> CompanyInfo:
    return CompanyInfo(
        company_id=reader.uint8(),
        name=reader.string(),
        manager=reader.string(),
        colour=reader.uint8(),
        protected=reader.boolean(),
        start_year=reader.uint32(),
        is_ai=reader.boolean(),
    )


def parse_company_update(reader: PayloadReader) -> CompanyUpdate:
    return CompanyUpdate(
        company_id=reader.uint8(),
        name=reader.string(),
        manager=reader.string(),
        colour=reader.uint8(),
        protected=reader.boolean(),
        bankruptcy=reader.uint8(),
        share_owners=[reader.uint8() for _ in range(SHARE_OWNER_COUNT)],
    )


def parse_company_remove(reader: PayloadReader) -> CompanyRemove:
    return CompanyRemove(company_id=reader.uint8(), reason=reader.uint8())


def parse_company_economy(reader: PayloadReader) -> CompanyEconomy:
    company_id = reader.uint8()
    money = reader.int64()
    loan = reader.uint64()
    income = reader.int64()
    delivered_cargo = reader.uint16()
    quarters = [
        QuarterEconomy(
            value=reader.uint64(),
            performance=reader.uint16(),
            delivered_cargo=reader.uint16(),
        )
        for _ in range(ECONOMY_QUARTERS)
    ]
    return CompanyEconomy(
        company_id=company_id,
        money=money,
        loan=loan,
        income=income,
        delivered_cargo=delivered_cargo,
        last_quarters=quarters,
    )


def parse_company_stats(reader: PayloadReader) -> CompanyStats:
    company_id = reader.uint8()
    vehicles = [reader.uint16() for _ in range(VEHICLE_TYPE_COUNT)]
    stations = [reader.uint16() for _ in range(VEHICLE_TYPE_COUNT)]
    return CompanyStats(company_id=company_id, vehicles=vehicles, stations=stations)


def parse_chat(reader: PayloadReader) -> ChatMessage:
    return ChatMessage(
        action=reader.uint8(),
        dest_type=reader.uint8(),
        client_id=reader.uint32(),
        message=reader.string(),
        data=reader.int64(),
    )


def parse_rcon(reader: PayloadReader) -> RconOutput:
    return RconOutput(colour=reader.uint16(), output=reader.string())


def parse_rcon_end(reader: PayloadReader) -> str:
    return reader.string()


def parse_console(reader: PayloadReader) -> ConsoleOutput:
    return ConsoleOutput(origin=reader.string(), text=reader.string())


def parse_pong(reader: PayloadReader) -> int:
    return reader.uint32()
