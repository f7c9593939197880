"""
OpenTTD Admin 核心库 - 配置模块

负责配置的加载、解析与强类型转换。
支持从 TOML 文件、环境变量或字典中加载配置。
"""

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_ADMIN_PORT = 3977
DEFAULT_CLIENT_NAME = "openttd-admin-core"
DEFAULT_CLIENT_VERSION = "0"


@dataclass(frozen=True)
class AdminConfig:
    """AdminConnection 的强类型配置对象。

    所有字段均为只读 (frozen=True)，确保配置在运行时不可变。

    Attributes:
        host: 游戏服务器地址。
        password: Admin 端口密码 (服务器 admin_password)。
        port: Admin 端口 (OpenTTD 默认为 3977)。
        client_name: 登录时上报的客户端名称。
        client_version: 登录时上报的客户端版本。
        connect_timeout: 建立 TCP 连接的超时秒数。
        read_size: 单次读取的最大字节数。
    """

    host: str
    password: str
    port: int = DEFAULT_ADMIN_PORT
    client_name: str = DEFAULT_CLIENT_NAME
    client_version: str = DEFAULT_CLIENT_VERSION
    connect_timeout: float = 10.0
    read_size: int = 4096

    def __repr__(self) -> str:
        """覆盖默认的 repr，隐藏密码字段，防止日志泄露敏感信息。"""
        return (
            f"<{self.__class__.__name__} "
            f"server={self.host}:{self.port}, "
            f"password='******', "
            f"client='{self.client_name}/{self.client_version}'>"
        )


def create_config_from_dict(raw_data: dict[str, Any]) -> AdminConfig:
    """通用工厂：将字典转换为强类型配置对象。

    Args:
        raw_data: 原始配置字典 (来自 TOML 或 Env)。

    Returns:
        AdminConfig: 验证并转换后的配置对象。

    Raises:
        ConfigError: 当必要字段缺失或格式错误时抛出。
    """
    try:

        def _req(key: str) -> Any:
            """获取必要字段，缺失则报错"""
            if key not in raw_data or raw_data[key] in (None, ""):
                raise ConfigError(f"配置缺失: 缺少必要字段 '{key}'")
            return raw_data[key]

        def _get(key: str, default: Any) -> Any:
            return raw_data.get(key, default)

        def _to_port(key: str) -> int:
            val = _get(key, DEFAULT_ADMIN_PORT)
            try:
                port = int(val)
            except (TypeError, ValueError):
                raise ConfigError(f"端口格式无效 '{key}': {val}")
            if not 0 < port < 65536:
                raise ConfigError(f"端口超出范围 '{key}': {port}")
            return port

        def _to_positive(key: str, default: float, cast: type) -> Any:
            val = _get(key, default)
            try:
                num = cast(val)
            except (TypeError, ValueError):
                raise ConfigError(f"数值格式无效 '{key}': {val}")
            if num <= 0:
                raise ConfigError(f"数值必须大于 0 '{key}': {val}")
            return num

        return AdminConfig(
            host=str(_req("host")),
            password=str(_req("password")),
            port=_to_port("port"),
            client_name=str(_get("client_name", DEFAULT_CLIENT_NAME)),
            client_version=str(_get("client_version", DEFAULT_CLIENT_VERSION)),
            connect_timeout=_to_positive("connect_timeout", 10.0, float),
            read_size=_to_positive("read_size", 4096, int),
        )

    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(f"配置生成失败: {e}") from e


def load_config_from_toml(file_path: Path, profile: str = "default") -> AdminConfig:
    """从 TOML 文件加载配置。

    支持多层级查找策略:
    1. [profile.xxx]: 优先查找指定的 profile 块。
    2. [admin]: 单服务器配置块。
    3. Root: 兼容根目录直接配置。

    Raises:
        ConfigError: 文件读取失败或 Profile 不存在。
    """
    if not file_path.exists():
        raise ConfigError(f"配置文件未找到: {file_path}")

    try:
        with open(file_path, "rb") as f:
            data = tomllib.load(f)
    except Exception as e:
        raise ConfigError(f"读取 TOML 失败: {e}") from e

    raw_config = {}

    if "profile" in data:
        if profile not in data["profile"]:
            raise ConfigError(f"未找到预设: [profile.{profile}]")
        raw_config = data["profile"][profile]
    elif "admin" in data:
        if profile != "default":
            logger.warning(f"配置仅包含 [admin] 节，忽略 profile='{profile}'。")
        raw_config = data["admin"]
    else:
        raw_config = data

    return create_config_from_dict(raw_config)


def load_config_from_env() -> AdminConfig:
    """从环境变量加载配置。

    读取所有以 `OTTD_ADMIN_` 开头的环境变量，并映射到配置字段。
    例如: `OTTD_ADMIN_HOST` -> `host`。

    Raises:
        ConfigError: 未检测到任何相关环境变量。
    """
    env_map = {
        "host": "HOST",
        "port": "PORT",
        "password": "PASSWORD",
        "client_name": "CLIENT_NAME",
        "client_version": "CLIENT_VERSION",
        "connect_timeout": "CONNECT_TIMEOUT",
        "read_size": "READ_SIZE",
    }

    raw_data = {}

    for cfg_key, env_suffix in env_map.items():
        val = os.environ.get(f"OTTD_ADMIN_{env_suffix}")
        if val is not None:
            raw_data[cfg_key] = val

    if not raw_data:
        raise ConfigError("未检测到 OTTD_ADMIN_ 前缀的环境变量")

    return create_config_from_dict(raw_data)
