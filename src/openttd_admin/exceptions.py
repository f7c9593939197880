# File: src/openttd_admin/exceptions.py
"""
OpenTTD Admin 核心库 - 异常体系 (Exceptions)

定义库内统一使用的异常类，以便上层应用（如 CLI/Bot）能进行精细的错误处理。
"""

from enum import IntEnum


class AdminError(Exception):
    """核心库所有内部异常的基类。

    上层应用可以通过捕获此异常来处理所有由 openttd-admin-core 抛出的已知错误。
    """

    pass


class ConfigError(AdminError):
    """配置加载或校验失败。

    触发场景:
    1. 缺少必要字段 (如 host/password)。
    2. 字段格式错误 (如端口号越界)。
    3. 找不到配置文件或环境变量。
    """

    pass


class NetworkError(AdminError):
    """传输层面的错误 (I/O 级别)。

    触发场景:
    1. TCP 连接被拒绝或 DNS 解析失败。
    2. 读写过程中连接被重置。
    3. 服务器主动关闭连接 (EOF)。

    注意: 本库不做自动重连，是否重试由上层决定。
    """

    pass


class ConnectTimeout(NetworkError):
    """建立 TCP 连接超时。"""

    pass


class ConnectionClosed(NetworkError):
    """对端关闭了连接 (读到 EOF)。"""

    pass


class ProtocolError(AdminError):
    """协议结构错误 (逻辑级别)。

    触发场景:
    1. 数据包载荷长度不足以解析出声明的字段。
    2. 字符串缺少 NUL 结尾。
    """

    pass


class MalformedHeader(ProtocolError):
    """帧头无法解析。

    只有在调用方违反约定 (不足 3 字节就要求解析帧头)，
    或数据流中出现声明长度小于 3 的帧时才会抛出。
    正常的流重组永远会先等待足够的字节。
    """

    pass


class StateError(AdminError):
    """状态机错误 (FSM Violation)。

    触发场景:
    1. 在未连接状态下发送命令。
    2. 对已关闭 (CLOSED) 的连接再次调用 connect。
    3. 重复调用 connect。
    """

    pass


class NetworkErrorCode(IntEnum):
    """服务器 SERVER_ERROR (0x66) 包携带的错误代码。

    取值与 OpenTTD 的 NetworkErrorCode 保持一致。
    """

    GENERAL = 0
    DESYNC = 1
    SAVEGAME_FAILED = 2
    CONNECTION_LOST = 3
    ILLEGAL_PACKET = 4
    NEWGRF_MISMATCH = 5
    NOT_AUTHORIZED = 6
    NOT_EXPECTED = 7
    WRONG_REVISION = 8
    NAME_IN_USE = 9
    WRONG_PASSWORD = 10
    COMPANY_MISMATCH = 11
    KICKED = 12
    CHEATER = 13
    FULL = 14
    TOO_MANY_COMMANDS = 15
    TIMEOUT_PASSWORD = 16
    TIMEOUT_COMPUTER = 17
    TIMEOUT_MAP = 18
    TIMEOUT_JOIN = 19
    INVALID_CLIENT_NAME = 20

    @property
    def description(self) -> str:
        """获取错误码对应的人类可读中文描述。"""
        _DESC_MAP = {
            0: "一般错误",
            1: "客户端与服务器不同步",
            2: "存档失败",
            3: "连接丢失",
            4: "非法数据包",
            5: "NewGRF 不匹配",
            6: "未授权",
            7: "收到非预期的数据包",
            8: "版本不匹配",
            9: "名称已被占用",
            10: "管理密码错误",
            11: "公司不匹配",
            12: "被服务器踢出",
            13: "检测到作弊",
            14: "服务器已满",
            15: "命令过多",
            16: "输入密码超时",
            17: "客户端响应超时",
            18: "地图下载超时",
            19: "加入游戏超时",
            20: "客户端名称无效",
        }
        return _DESC_MAP.get(self.value, f"未知错误 (Code: {hex(self.value)})")


class ProtocolFault(AdminError):
    """服务器明确拒绝 (FULL / BANNED / SERVER_ERROR)。

    不会导致进程退出，但收到后该连接应视为不可用。
    """

    def __init__(self, message: str, error_code: int | str | None = None) -> None:
        """初始化协议故障。

        Args:
            message: 错误描述信息。
            error_code: 服务器给出的错误代码。整数会尝试转换为
                NetworkErrorCode 枚举，并使用标准描述覆盖 message。
        """
        self.error_code_enum: NetworkErrorCode | None = None

        if isinstance(error_code, int):
            try:
                self.error_code_enum = NetworkErrorCode(error_code)
                message = self.error_code_enum.description
            except ValueError:
                pass

        super().__init__(message)
        self.error_code = error_code
